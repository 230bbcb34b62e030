"""
The install ledger: which package references have been installed.

Stored as newline-delimited text at LEDGER_PATH. It is read, changed in
memory and rewritten whole, without locking; concurrent runs are last-writer-wins.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from bundlepm.data.repository import LEDGER_PATH, split_lines
from bundlepm.domain.models import PackageReference
from bundlepm.storage.file_store import FileStore

logger = logging.getLogger(__name__)


def _dedupe(refs: Iterable[str]) -> List[str]:
    # dict keeps first-seen order
    return list(dict.fromkeys(ref.strip() for ref in refs if ref and ref.strip()))


class InstallLedger:
    """Loads and saves the install ledger through a FileStore."""

    def __init__(self, store: FileStore, path: str = LEDGER_PATH):
        self._store = store
        self._path = path

    async def load(self) -> List[PackageReference]:
        """Return the recorded references, deduplicated, without blank entries."""
        return _dedupe(split_lines(await self._store.read(self._path)))

    async def save(self, refs: Iterable[PackageReference]) -> List[PackageReference]:
        entries = _dedupe(refs)
        await self._store.write(self._path, "\n".join(entries))
        return entries

    async def add(self, refs: Iterable[PackageReference]) -> List[PackageReference]:
        """
        Union refs into the ledger and write it back.

        Nothing is ever removed here; the ledger only grows.
        """
        current = await self.load()
        entries = await self.save([*current, *refs])
        logger.debug(f"Ledger now holds {len(entries)} references")
        return entries
