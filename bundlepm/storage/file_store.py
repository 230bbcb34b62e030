from abc import ABC, abstractmethod
from typing import List


class FileStore(ABC):
    """
    Abstract key-value filesystem keyed by virtual path (e.g. "/etc/bundlepm/x.txt").

    Every operation is a suspension point; callers await them one at a time.
    """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Return True if a file is stored at path."""
        pass

    @abstractmethod
    async def read(self, path: str) -> str:
        """Return the file's text, or an empty string if it does not exist."""
        pass

    @abstractmethod
    async def write(self, path: str, content: str) -> None:
        """Write content to path, replacing anything already there."""
        pass

    @abstractmethod
    async def list(self, prefix: str) -> List[str]:
        """Return the sorted paths of every file at or below prefix."""
        pass

    @abstractmethod
    async def remove(self, path: str) -> bool:
        """Delete the file at path. Returns False if there was nothing to delete."""
        pass
