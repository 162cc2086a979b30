"""Compiler version range handling for toolchain-config library.

Ranges use npm/semver syntax, the same syntax the host toolchain accepts for
``compilers.solc.version``:

- exact versions and comparators: ``0.4.24``, ``>=0.4.22``, ``<0.5``
- caret and tilde: ``^0.4.24``, ``~0.4.2``
- x-ranges: ``0.4.x``, ``0.4``, ``*``
- hyphen ranges: ``0.4.1 - 0.4.9``, alone or with other comparators
- AND sets joined by whitespace, OR sets joined by ``||``
"""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import List, Optional, Tuple, Union

from .exceptions import InvalidVersionRangeError, VersionNotFoundError

_VERSION_RE = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)"
    r"(?:-([0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)

_PARTIAL_RE = re.compile(
    r"^v?(\d+|[xX*])"
    r"(?:\.(\d+|[xX*]))?"
    r"(?:\.(\d+|[xX*]))?"
    r"(?:-([0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)

_OPERATOR_RE = re.compile(r"^(<=|>=|<|>|=|\^|~>?)?(.*)$")


@total_ordering
@dataclass(frozen=True)
class Version:
    """A MAJOR.MINOR.PATCH version with optional prerelease tag."""

    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def release(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def _key(self):
        # A release sorts after all of its prereleases
        if not self.prerelease:
            return (self.release, 1, ())
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in self.prerelease
        )
        return (self.release, 0, identifiers)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        return text


def parse_version(text: str) -> Version:
    """
    Parse a full semantic version.

    Build metadata (``+commit.e67f0147``) is accepted and discarded.

    Args:
        text: Version string, e.g. "0.4.24" or "v0.5.0-nightly.2018.11.13"

    Returns:
        Parsed Version

    Raises:
        InvalidVersionRangeError: If text is not a full version
    """
    match = _VERSION_RE.match(text.strip())
    if match is None:
        raise InvalidVersionRangeError(f"Invalid version: '{text}'")

    major, minor, patch, pre = match.groups()
    prerelease = tuple(pre.split(".")) if pre else ()
    return Version(int(major), int(minor), int(patch), prerelease)


@dataclass(frozen=True)
class Comparator:
    """A single ``<op><version>`` constraint."""

    operator: str  # one of "<", "<=", ">", ">=", "="
    version: Version

    def test(self, version: Version) -> bool:
        if self.operator == "=":
            return version == self.version
        if self.operator == "<":
            return version < self.version
        if self.operator == "<=":
            return version <= self.version
        if self.operator == ">":
            return version > self.version
        return version >= self.version

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"


class VersionRange:
    """A parsed version range: OR of AND-ed comparator sets."""

    def __init__(self, text: str, comparator_sets: List[List[Comparator]]):
        self.text = text
        self.comparator_sets = comparator_sets

    def matches(self, version: Union[str, Version]) -> bool:
        """
        Check whether a version satisfies this range.

        A prerelease version only matches a set containing a comparator
        with a prerelease on the same MAJOR.MINOR.PATCH.

        Args:
            version: Version or version string

        Returns:
            True if any comparator set is satisfied
        """
        if isinstance(version, str):
            version = parse_version(version)

        for comparators in self.comparator_sets:
            if not all(c.test(version) for c in comparators):
                continue
            if not version.is_prerelease:
                return True
            if any(
                c.version.is_prerelease and c.version.release == version.release
                for c in comparators
            ):
                return True
        return False

    def __contains__(self, version: Union[str, Version]) -> bool:
        return self.matches(version)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"VersionRange({self.text!r})"


def _parse_partial(text: str, original: str) -> Tuple[List[Optional[int]], Tuple[str, ...]]:
    match = _PARTIAL_RE.match(text)
    if match is None:
        raise InvalidVersionRangeError(f"Invalid version range: '{original}'")

    major, minor, patch, pre = match.groups()
    parts: List[Optional[int]] = []
    for part in (major, minor, patch):
        if part is None or part in ("x", "X", "*"):
            parts.append(None)
        else:
            parts.append(int(part))

    # Anything after a wildcard is a wildcard too (1.x.3 == 1.x)
    for i in range(3):
        if parts[i] is None:
            parts[i + 1:] = [None] * (2 - i)
            break

    prerelease = tuple(pre.split(".")) if pre else ()
    return parts, prerelease


def _floor(parts: List[Optional[int]], prerelease: Tuple[str, ...] = ()) -> Version:
    major, minor, patch = (p if p is not None else 0 for p in parts)
    return Version(major, minor, patch, prerelease if parts[2] is not None else ())


def _bump(parts: List[Optional[int]], prerelease: Tuple[str, ...] = ("0",)) -> Version:
    """Smallest version above every version the partial covers."""
    major, minor, _ = parts
    if minor is None:
        return Version(major + 1, 0, 0, prerelease)
    return Version(major, minor + 1, 0, prerelease)


def _expand(operator: str, parts: List[Optional[int]], prerelease: Tuple[str, ...]) -> List[Comparator]:
    major, minor, patch = parts

    if major is None:
        # "*", "x", ">=*": everything; "<*", ">*": nothing
        if operator in ("<", ">"):
            return [Comparator("<", Version(0, 0, 0, ("0",)))]
        return [Comparator(">=", Version(0, 0, 0))]

    full = patch is not None
    floor = _floor(parts, prerelease)

    if operator == "^":
        if major > 0 or minor is None:
            ceiling = Version(major + 1, 0, 0, ("0",))
        elif minor > 0 or patch is None:
            ceiling = Version(0, minor + 1, 0, ("0",))
        else:
            ceiling = Version(0, 0, patch + 1, ("0",))
        return [Comparator(">=", floor), Comparator("<", ceiling)]

    if operator in ("~", "~>"):
        return [Comparator(">=", floor), Comparator("<", _bump(parts))]

    if operator == "=":
        if full:
            return [Comparator("=", floor)]
        return [Comparator(">=", floor), Comparator("<", _bump(parts))]

    if operator == ">":
        if full:
            return [Comparator(">", floor)]
        return [Comparator(">=", _bump(parts, ()))]

    if operator == ">=":
        return [Comparator(">=", floor)]

    if operator == "<":
        if full:
            return [Comparator("<", floor)]
        return [Comparator("<", Version(major, minor or 0, 0, ("0",)))]

    # "<="
    if full:
        return [Comparator("<=", floor)]
    return [Comparator("<", _bump(parts))]


def _parse_set(text: str, original: str) -> List[Comparator]:
    text = text.strip()
    if not text:
        return [Comparator(">=", Version(0, 0, 0))]

    # "^ 0.4.24" is equivalent to "^0.4.24"
    text = re.sub(r"(<=|>=|<|>|=|\^|~>?)\s+", r"\1", text)

    tokens = text.split()
    comparators: List[Comparator] = []
    i = 0
    while i < len(tokens):
        # "A - B" may sit alongside other comparators in the same set
        if i + 2 < len(tokens) and tokens[i + 1] == "-":
            low_parts, low_pre = _parse_partial(tokens[i], original)
            high_parts, high_pre = _parse_partial(tokens[i + 2], original)
            comparators.extend(_expand(">=", low_parts, low_pre))
            comparators.extend(_expand("<=", high_parts, high_pre))
            i += 3
            continue

        token = tokens[i]
        i += 1
        operator, rest = _OPERATOR_RE.match(token).groups()
        if not rest:
            raise InvalidVersionRangeError(f"Invalid version range: '{original}'")
        parts, prerelease = _parse_partial(rest, original)
        comparators.extend(_expand(operator or "=", parts, prerelease))
    return comparators


def parse_version_range(text: str) -> VersionRange:
    """
    Parse a semantic-version range.

    Args:
        text: Range string, e.g. "^0.4.24" or ">=0.4.22 <0.6.0 || 0.8.x"

    Returns:
        Parsed VersionRange

    Raises:
        InvalidVersionRangeError: If text is not a string or is malformed
    """
    if not isinstance(text, str):
        raise InvalidVersionRangeError(
            f"Version range must be a string, got {type(text).__name__}"
        )

    comparator_sets = [_parse_set(part, text) for part in text.split("||")]
    return VersionRange(text.strip(), comparator_sets)


def is_valid_version_range(text: str) -> bool:
    """Return True if text parses as a version range."""
    try:
        parse_version_range(text)
    except InvalidVersionRangeError:
        return False
    return True


def filter_stable_versions(versions: List[str]) -> List[str]:
    """
    Filter compiler versions to only include stable releases.

    Stable versions:
    - Parse as MAJOR.MINOR.PATCH (build metadata allowed)
    - Carry no prerelease tag (nightlies are prereleases)

    Args:
        versions: List of version strings

    Returns:
        List of stable version strings, in input order
    """
    stable = []
    for text in versions:
        try:
            version = parse_version(text)
        except InvalidVersionRangeError:
            continue
        if not version.is_prerelease:
            stable.append(text)
    return stable


def select_compiler_version(range_text: str, available: List[str]) -> str:
    """
    Pick the newest stable version satisfying a range.

    Args:
        range_text: Version range, e.g. "^0.4.24"
        available: Candidate version strings

    Returns:
        The matching version string as given in available

    Raises:
        InvalidVersionRangeError: If range_text is malformed
        VersionNotFoundError: If no stable candidate matches
    """
    version_range = parse_version_range(range_text)

    candidates = [
        (parse_version(text), text)
        for text in filter_stable_versions(available)
        if version_range.matches(text)
    ]
    if not candidates:
        raise VersionNotFoundError(
            f"No available compiler version satisfies '{range_text}'"
        )

    return max(candidates)[1]
