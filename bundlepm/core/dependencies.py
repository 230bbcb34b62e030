from pathlib import Path
from typing import Optional
import os

from bundlepm.domain.models import ClientSettings
from bundlepm.storage.file_store import FileStore
from bundlepm.storage.local_file_store import LocalFileStore

ROOT_ENV_VAR = "BUNDLEPM_ROOT"
LIST_URLS_ENV_VAR = "BUNDLEPM_LIST_URLS"
HTTP_TIMEOUT_ENV_VAR = "BUNDLEPM_HTTP_TIMEOUT"
LOG_LEVEL_ENV_VAR = "BUNDLEPM_LOG_LEVEL"

_DEFAULT_ROOT_DIR = Path("~/.bundlepm")

_settings: Optional[ClientSettings] = None
_file_store: Optional[FileStore] = None


def load_settings() -> ClientSettings:
    """
    Build settings from the environment.

    Priority for the filesystem root:
    1. Environment variable BUNDLEPM_ROOT
    2. ~/.bundlepm
    """
    values = {
        "root_dir": os.environ.get(ROOT_ENV_VAR) or str(_DEFAULT_ROOT_DIR),
        "default_list_urls": os.environ.get(LIST_URLS_ENV_VAR, "").split(),
    }
    timeout = os.environ.get(HTTP_TIMEOUT_ENV_VAR)
    if timeout:
        values["http_timeout_seconds"] = timeout
    log_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if log_level:
        values["log_level"] = log_level.upper()
    return ClientSettings(**values)


def get_settings() -> ClientSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_file_store() -> FileStore:
    global _file_store
    if _file_store is None:
        _file_store = LocalFileStore(Path(get_settings().root_dir))
    return _file_store


def reset_state() -> None:
    """Forget cached settings and store, so the next call re-reads the environment."""
    global _settings, _file_store
    _settings = None
    _file_store = None
