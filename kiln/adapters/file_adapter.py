"""File adapter for abstracting file system operations."""

import shutil
from pathlib import Path

from kiln.core.errors import KilnError
from kiln.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)


class FileSystemAdapter:
    """Local file system implementation of FileAdapterProtocol."""

    def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        try:
            with path.open(encoding=encoding, newline="") as f:
                return f.read()
        except OSError as e:
            logger.error("file_read_failed", path=str(path), error=str(e))
            raise KilnError(
                f"Cannot read file {path}: {e}", {"path": str(path)}
            ) from e

    def write_text(self, path: Path, content: str, encoding: str = "utf-8") -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding=encoding, newline="")
        except OSError as e:
            logger.error("file_write_failed", path=str(path), error=str(e))
            raise KilnError(
                f"Cannot write file {path}: {e}", {"path": str(path)}
            ) from e

    def copy_file(self, src: Path, dst: Path) -> None:
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dst)
        except OSError as e:
            logger.error("file_copy_failed", src=str(src), dst=str(dst), error=str(e))
            raise KilnError(
                f"Cannot copy {src} to {dst}: {e}", {"src": str(src), "dst": str(dst)}
            ) from e
        logger.debug("file_copied", src=str(src), dst=str(dst))

    def exists(self, path: Path) -> bool:
        return path.exists()

    def mkdir(self, path: Path, parents: bool = True, exist_ok: bool = True) -> None:
        try:
            path.mkdir(parents=parents, exist_ok=exist_ok)
        except OSError as e:
            raise KilnError(
                f"Cannot create directory {path}: {e}", {"path": str(path)}
            ) from e


def create_file_adapter() -> FileSystemAdapter:
    """Create a file adapter instance."""
    return FileSystemAdapter()
