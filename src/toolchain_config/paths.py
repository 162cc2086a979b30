"""Path management utilities for toolchain-config library."""

import os
from pathlib import Path
from typing import Optional, Union

from .constants import CONFIG_PATH_ENV


def get_default_config_dir() -> Path:
    """
    Get default configuration directory.

    Returns:
        Path to ./.toolchain-config
    """
    return Path.cwd() / ".toolchain-config"


def get_config_path(config_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Get configuration file path.

    $TOOLCHAIN_CONFIG_PATH wins over the default directory when no
    explicit root is given.

    Args:
        config_root: Custom config directory (defaults to ./.toolchain-config)

    Returns:
        Absolute path to networks.json
    """
    if config_root is None:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path).absolute()
        config_root = get_default_config_dir()
    else:
        config_root = Path(config_root).absolute()

    return config_root / "networks.json"
