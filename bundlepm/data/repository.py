from __future__ import annotations

import logging
from typing import Iterable, List

from bundlepm.storage.file_store import FileStore

logger = logging.getLogger(__name__)


CONFIG_DIR = "/etc/bundlepm"
SOURCE_URLS_PATH = f"{CONFIG_DIR}/pkl_url_list.txt"
LEDGER_PATH = f"{CONFIG_DIR}/installed_packages.txt"
PACKAGE_LIST_CACHE_DIR = f"{CONFIG_DIR}/cache/package_lists"


def split_lines(text: str) -> List[str]:
    """Split newline-delimited text, dropping blank entries and surrounding whitespace."""
    return [line.strip() for line in text.splitlines() if line.strip()]


async def is_initialized(store: FileStore) -> bool:
    return await store.exists(SOURCE_URLS_PATH) and await store.exists(LEDGER_PATH)


async def ensure_initialized(store: FileStore, default_urls: Iterable[str]) -> bool:
    """
    Create the configuration file and the ledger if either is missing.

    Only missing files are written; an existing ledger is never reset.
    Returns True if anything was written.
    """
    if await is_initialized(store):
        return False

    logger.warning("Filesystem not initialized.")
    if not await store.exists(SOURCE_URLS_PATH):
        await store.write(SOURCE_URLS_PATH, "\n".join(default_urls))
    if not await store.exists(LEDGER_PATH):
        await store.write(LEDGER_PATH, "")
    logger.info("Initialized filesystem.")
    return True


async def load_source_urls(store: FileStore) -> List[str]:
    """Return the configured package list URLs."""
    return split_lines(await store.read(SOURCE_URLS_PATH))
