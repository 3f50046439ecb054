"""Environment helpers for credential references in account configs."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv

from funnelscope.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def require_env(name: str, purpose: Optional[str] = None) -> str:
    """Value of a mandatory environment variable.

    Raises:
        ConfigurationError: variable unset or empty; `purpose` is appended
            to the message so the operator knows which option needs it
    """
    value = os.getenv(name)
    if not value:
        message = f'Environment variable "{name}" is not set'
        if purpose:
            message += f" (required for {purpose})"
        raise ConfigurationError(message)
    return value


def load_env_file(path: Optional[Union[str, Path]] = None) -> bool:
    """Load a .env file into os.environ without overriding existing variables.

    WHAT:
        Uses `path` when given, otherwise the nearest .env from the working
        directory upwards.
    WHY:
        `$VAR` references in account configs resolve during local runs while
        variables injected by the deployment always win.
    """
    dotenv_path = str(path) if path is not None else find_dotenv(usecwd=True)
    if not dotenv_path:
        logger.debug("[ENV] No .env file found")
        return False

    loaded = load_dotenv(dotenv_path, override=False)
    if loaded:
        logger.info("[ENV] Loaded %s (existing variables were not overwritten)", dotenv_path)
    return loaded
