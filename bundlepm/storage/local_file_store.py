from pathlib import Path
from typing import List
import logging

import aiofiles
import aiofiles.os

from bundlepm.storage.file_store import FileStore

logger = logging.getLogger(__name__)


class LocalFileStore(FileStore):
    """
    FileStore backed by a directory on disk.

    Virtual paths are taken relative to the root directory whether or not they
    start with "/"; a path that would land outside the root is rejected.
    """

    def __init__(self, root_dir: Path):
        self._root_dir = Path(root_dir).expanduser().resolve()

        # Ensure root directory exists
        if not self._root_dir.exists():
            self._root_dir.mkdir(parents=True, exist_ok=True)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def _to_disk_path(self, path: str) -> Path:
        target = (self._root_dir / path.lstrip("/")).resolve()
        if target != self._root_dir and self._root_dir not in target.parents:
            raise ValueError(f"Path escapes the filesystem root: {path}")
        return target

    def _to_virtual_path(self, disk_path: Path) -> str:
        return "/" + disk_path.relative_to(self._root_dir).as_posix()

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.isfile(self._to_disk_path(path))

    async def read(self, path: str) -> str:
        disk_path = self._to_disk_path(path)
        if not await aiofiles.os.path.isfile(disk_path):
            return ""
        async with aiofiles.open(disk_path, "r", encoding="utf-8") as f:
            return await f.read()

    async def write(self, path: str, content: str) -> None:
        disk_path = self._to_disk_path(path)
        await aiofiles.os.makedirs(disk_path.parent, exist_ok=True)
        async with aiofiles.open(disk_path, "w", encoding="utf-8") as f:
            await f.write(content)
        logger.debug(f"Wrote {len(content)} characters to {path}")

    async def list(self, prefix: str) -> List[str]:
        base = self._to_disk_path(prefix)
        if await aiofiles.os.path.isfile(base):
            return [self._to_virtual_path(base)]
        if not await aiofiles.os.path.isdir(base):
            return []
        return sorted(self._to_virtual_path(p) for p in base.rglob("*") if p.is_file())

    async def remove(self, path: str) -> bool:
        disk_path = self._to_disk_path(path)
        if not await aiofiles.os.path.isfile(disk_path):
            return False
        await aiofiles.os.remove(disk_path)
        logger.debug(f"Removed {path}")
        return True
