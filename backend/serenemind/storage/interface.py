"""
Storage Interface - Abstract base class for all storage implementations.
Keeps the session store independent of where the bytes live.
"""

from abc import ABC, abstractmethod
from typing import Optional, List


class StorageInterface(ABC):
    """
    Abstract storage interface for path-addressed documents.
    Paths are relative to the implementation's root.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> bool:
        """
        Save content to the specified path, replacing any previous content.

        Args:
            path: Relative path (e.g., "sessions/session_1700000000000_ab12cd.json")
            content: Content to save (bytes or text)

        Returns:
            bool: True once the content is stored

        Raises:
            StorageUnavailable: If the content cannot be written
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Args:
            path: Relative path to load from

        Returns:
            Optional[bytes]: File content, or None if nothing is stored there
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether something is stored at ``path``."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the content at the specified path.

        Returns:
            bool: True if something was deleted, False if nothing was there
        """
        pass

    @abstractmethod
    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        """
        List files directly under a directory.

        Args:
            path: Directory path to list
            pattern: Optional glob pattern to filter files (e.g., "*.json")

        Returns:
            List[str]: Sorted relative file paths; empty if the directory is missing
        """
        pass
