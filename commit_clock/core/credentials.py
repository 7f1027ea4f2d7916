"""
Credentials - GitHub token discovery
"""
import os
from pathlib import Path
from typing import Optional

from .logging_service import get_logger


TOKEN_ENV_VARS = ('GITHUB_TOKEN', 'CHRONO_GITHUB_TOKEN')
DEFAULT_TOKEN_FILE = '~/.config/chrono/token'


def load_github_token(token_file: str = DEFAULT_TOKEN_FILE) -> Optional[str]:
    """
    Find a GitHub token.

    Environment variables are checked in order, then the token file.
    Surrounding whitespace is stripped and an empty value counts as missing.

    Args:
        token_file: Fallback file holding the token

    Returns:
        Token string, or None when no token is configured
    """
    for name in TOKEN_ENV_VARS:
        token = os.environ.get(name, '').strip()
        if token:
            get_logger().debug(f"GitHub token taken from ${name}")
            return token

    path = Path(token_file).expanduser()
    try:
        token = path.read_text(encoding='utf-8').strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        get_logger().warning(f"Could not read token file {path}: {e}")
        return None

    if not token:
        return None

    get_logger().debug(f"GitHub token taken from {path}")
    return token
