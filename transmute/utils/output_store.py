"""
Output file storage.

Converted files are written into the configured output directory and served
back from there by name.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from .error_handling import OutputPersistenceFailed
from .logging_config import get_logger

logger = get_logger(__name__)

PARTIAL_PREFIX = ".partial-"


class OutputStore:
    """
    Directory-backed store for converted files.

    Files are written through a temporary sibling and renamed into place so a
    reader never sees a partially written output.
    """

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def path_for(self, filename: str) -> Optional[Path]:
        """
        Resolve a filename inside the store.

        Returns:
            The absolute path, or None if the name is empty, contains a NUL
            byte or escapes the directory
        """
        if not filename or "\x00" in filename or filename in (".", ".."):
            return None
        base = self.base_dir.resolve()
        candidate = (base / filename).resolve()
        if candidate.parent != base:
            return None
        return candidate

    def save(self, filename: str, content: bytes) -> Path:
        """
        Write an output file, replacing any previous file with the same name.

        Args:
            filename: Output filename (no directory components)
            content: File content

        Returns:
            Path of the written file

        Raises:
            OutputPersistenceFailed: If the name is invalid or the write fails
        """
        target = self.path_for(filename)
        if target is None:
            raise OutputPersistenceFailed(f"Invalid output filename: '{filename}'", {"filename": str(filename)})

        temp_path = None
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=target.parent, prefix=PARTIAL_PREFIX, suffix=target.suffix)
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.replace(temp_path, target)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            raise OutputPersistenceFailed(f"Failed to write {filename}: {e}", {"filename": filename}) from e

        logger.debug(f"Stored output file: {target}")
        return target

    def open_path(self, filename: str) -> Optional[Path]:
        """Get the path of a stored file, or None if it does not exist."""
        path = self.path_for(filename)
        if path is None or path.name.startswith(PARTIAL_PREFIX) or not path.is_file():
            return None
        return path
