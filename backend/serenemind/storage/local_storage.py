"""
Local Filesystem Storage Implementation.
Stores every document as a file under a base directory on the server.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional, List

import aiofiles
import aiofiles.os

from ..core.exceptions import StorageUnavailable
from .interface import StorageInterface

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """
    Local filesystem storage implementation.
    The base directory is created when the storage is constructed.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Base directory for all stored files

        Raises:
            StorageUnavailable: If the directory cannot be created
        """
        self.base_dir = Path(base_dir).resolve()
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot create storage directory {self.base_dir}: {e}") from e

    def _get_full_path(self, path: str) -> Path:
        """Convert relative path to full absolute path within base directory."""
        full_path = (self.base_dir / path).resolve()

        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise ValueError(f"Invalid path: {path} - path traversal detected")

        return full_path

    async def save(self, path: str, content: bytes | str) -> bool:
        """Write to a temporary sibling, then rename over the target."""
        full_path = self._get_full_path(path)
        tmp_path = full_path.with_name(f".{full_path.name}.{uuid.uuid4().hex}.tmp")
        data = content.encode('utf-8') if isinstance(content, str) else content

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, 'wb') as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, full_path)
        except OSError as e:
            logger.error(f"Error saving file {path}: {e}")
            tmp_path.unlink(missing_ok=True)
            raise StorageUnavailable(f"Cannot write {path}: {e}") from e

        return True

    async def load(self, path: str) -> Optional[bytes]:
        full_path = self._get_full_path(path)
        try:
            async with aiofiles.open(full_path, 'rb') as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Error loading file {path}: {e}")
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e

    async def exists(self, path: str) -> bool:
        try:
            return self._get_full_path(path).is_file()
        except ValueError:
            return False

    async def delete(self, path: str) -> bool:
        full_path = self._get_full_path(path)
        try:
            await aiofiles.os.remove(full_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Error deleting file {path}: {e}")
            raise StorageUnavailable(f"Cannot delete {path}: {e}") from e
        return True

    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        """List files in a directory; a missing or unreadable directory lists as empty."""
        try:
            full_path = self._get_full_path(path)
            if not full_path.is_dir():
                return []
            entries = full_path.glob(pattern or "*")
            return sorted(
                str(p.relative_to(self.base_dir)).replace(os.sep, "/")
                for p in entries
                if p.is_file() and not p.name.startswith(".")
            )
        except OSError as e:
            logger.error(f"Error listing files in {path}: {e}")
            return []
