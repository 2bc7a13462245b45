"""Bitstamp API credentials.

A key/secret pair is taken from exactly one source. The environment pair
(BITSTAMP_ACCESS_KEY, BITSTAMP_ACCESS_SECRET) wins when both variables are
set. Otherwise the pair is read from a JSON credentials file, located by the
``config_path`` argument, then BITSTAMP_CONFIG_PATH, then
``~/.bitstamp_config.json``. Sources are never mixed: half a pair in the
environment is an error, not a hint to look elsewhere.
"""
import json
import os
from pathlib import Path
from typing import NamedTuple, Optional, Union

from .logging_setup import logger

KEY_ENV = "BITSTAMP_ACCESS_KEY"
SECRET_ENV = "BITSTAMP_ACCESS_SECRET"
CONFIG_PATH_ENV = "BITSTAMP_CONFIG_PATH"
DEFAULT_FILE_NAME = ".bitstamp_config.json"


class BitstampCredentials(NamedTuple):
    api_key: str
    api_secret: str

    def __repr__(self) -> str:
        return f"BitstampCredentials(api_key={self.api_key!r}, api_secret='***')"

    @classmethod
    def from_env(cls) -> Optional["BitstampCredentials"]:
        """The environment pair, or None when neither variable is set."""
        api_key = os.getenv(KEY_ENV)
        api_secret = os.getenv(SECRET_ENV)
        if api_key and api_secret:
            return cls(api_key, api_secret)
        if api_key or api_secret:
            missing = SECRET_ENV if api_key else KEY_ENV
            raise ValueError(f"Incomplete Bitstamp credentials in environment: {missing} is not set")
        return None

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "BitstampCredentials":
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, ValueError) as e:
            raise ValueError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(data, dict) or not data.get("api_key") or not data.get("api_secret"):
            raise ValueError(f"Missing Bitstamp credentials in {path}: need 'api_key' and 'api_secret'")
        return cls(str(data["api_key"]), str(data["api_secret"]))


def credentials_path(config_path: Optional[str] = None) -> Path:
    if config_path:
        return Path(config_path)
    return Path(os.getenv(CONFIG_PATH_ENV) or Path.home() / DEFAULT_FILE_NAME)


def load_credentials(config_path: Optional[str] = None) -> BitstampCredentials:
    """Load the key/secret pair for signed calls.

    Raises:
        ValueError: No complete pair is available, or the file is unreadable
    """
    creds = BitstampCredentials.from_env()
    if creds is not None:
        logger.debug("Using Bitstamp credentials from environment")
        return creds

    path = credentials_path(config_path)
    if not path.exists():
        raise ValueError(
            f"Missing Bitstamp credentials: set {KEY_ENV} and {SECRET_ENV}, "
            f"or write them to {path} (location can be changed with {CONFIG_PATH_ENV})"
        )
    logger.debug(f"Using Bitstamp credentials from {path}")
    return BitstampCredentials.from_file(path)


def save_config(config_path: str, credentials: BitstampCredentials) -> Path:
    """Write ``credentials`` as JSON, readable by the owner only.

    The secret is stored in plaintext.
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        json.dump(credentials._asdict(), f, indent=2)
    # an existing file keeps its old mode through os.open
    try:
        path.chmod(0o600)
    except OSError as e:
        logger.warning(f"Could not restrict permissions on {path}: {e}")
    return path
