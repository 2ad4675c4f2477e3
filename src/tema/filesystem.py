"""File system access used for template lookup and default rendering.

Engines only need two capabilities: reading a file as text and listing all
files below a directory. Both are coroutines so a lookup never blocks the
event loop; LocalFileSystem pushes the blocking work to a worker thread.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """Capabilities the engine needs from a file system."""

    async def read_text(self, path: str | Path) -> str:
        """Return the full contents of ``path``.

        Raises:
            OSError: If the file is missing or unreadable
        """
        ...

    async def list_files(self, root: str | Path) -> list[str]:
        """Return every file below ``root``, relative to it, with "/" separators.

        Order is unspecified. A root that does not exist yields an empty list.

        Raises:
            OSError: If the root exists but cannot be read
        """
        ...


class LocalFileSystem:
    """FileSystem backed by the local disk."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    async def read_text(self, path: str | Path) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding=self.encoding)

    async def list_files(self, root: str | Path) -> list[str]:
        return await asyncio.to_thread(self._list_files, Path(root))

    @staticmethod
    def _list_files(root: Path) -> list[str]:
        if not root.is_dir():
            logger.debug("Template root does not exist: %s", root)
            return []
        return [
            path.relative_to(root).as_posix()
            for path in root.rglob("*")
            if path.is_file()
        ]
