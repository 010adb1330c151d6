"""Protocol definition for file system operations."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileAdapterProtocol(Protocol):
    """Protocol for file system operations."""

    def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        """Read text content from a file.

        Raises:
            KilnError: If the file cannot be read
        """
        ...

    def write_text(self, path: Path, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file, creating parent directories.

        Raises:
            KilnError: If the file cannot be written
        """
        ...

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file, creating the destination directory as needed.

        Raises:
            KilnError: If the file cannot be copied
        """
        ...

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def mkdir(self, path: Path, parents: bool = True, exist_ok: bool = True) -> None:
        """Create a directory."""
        ...
