"""Platform-specific directory detection for chartbroker configuration."""

import os
import sys
from pathlib import Path

CONFIG_DIR_ENV = "CHARTBROKER_CONFIG_DIR"
WORK_DIR_ENV = "CHARTBROKER_WORK_DIR"


def in_virtualenv() -> bool:
    """Check if running in a virtual environment."""
    return sys.prefix != sys.base_prefix


def is_user_install() -> bool:
    """Check if this is a user install (pip install --user)."""
    return sys.prefix.startswith(str(Path.home()))


def get_config_location() -> Path:
    """Get config location.

    Priority:
    1. CHARTBROKER_CONFIG_DIR environment variable
    2. Development: ./config next to the nearest pyproject.toml
    3. User install: ~/.config/chartbroker
    4. Virtualenv: sibling to venv
    5. Fallback: /etc/chartbroker
    """
    if env_dir := os.environ.get(CONFIG_DIR_ENV):
        return Path(env_dir)

    cwd = Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        if (parent / "pyproject.toml").exists():
            return parent / "config"

    if is_user_install():
        return Path.home() / ".config" / "chartbroker"

    if in_virtualenv():
        return Path(sys.prefix).parent / "config"

    return Path("/etc/chartbroker")


def get_work_location() -> Path:
    """Work directory for the json record store; sibling to the config dir by default."""
    if env_dir := os.environ.get(WORK_DIR_ENV):
        return Path(env_dir)
    return get_config_location().parent / "work"
