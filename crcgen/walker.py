import logging
import os
from dataclasses import dataclass
from typing import Literal, Optional

logger = logging.getLogger(__name__)


@dataclass
class FSEntry:
    """Scanned file or directory; `last_modified` is in epoch seconds."""

    name: str
    path: str
    type: Literal['file', 'dir']
    size: Optional[int] = None
    last_modified: Optional[int] = None

    @classmethod
    def from_stat(cls, path: str, info: os.stat_result) -> 'FSEntry':
        return cls(os.path.basename(path), path, 'file', info.st_size, int(info.st_mtime))


def _is_hidden(name: str) -> bool:
    return name.startswith('.')


def scan_directory(path: str, show_hidden: bool = True) -> list[FSEntry]:
    """List directory content with metadata, recursively.

    Parameters
    ----------
    path : str
        Directory path.
    show_hidden : bool, default=True
        Include names starting with a dot.

    Returns
    -------
    list[FSEntry]
        Directories and files found under `path`.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"No such file or directory: '{path}'")
    if not os.path.isdir(path):
        raise NotADirectoryError(f"Not a directory: '{path}'")

    def on_error(err: OSError) -> None:
        logger.warning("skipping unreadable directory '%s': %s", err.filename, err.strerror or err)

    result = []
    for root, dirs, files in os.walk(path, onerror=on_error):
        if not show_hidden:
            dirs[:] = [name for name in dirs if not _is_hidden(name)]
        dirs.sort()
        for name in dirs:
            if os.path.islink(os.path.join(root, name)):
                continue
            result.append(FSEntry(name, os.path.join(root, name), 'dir'))
        for name in sorted(files):
            if not show_hidden and _is_hidden(name):
                continue
            file_path = os.path.join(root, name)
            try:
                info = os.stat(file_path)
            except OSError as err:
                logger.warning("skipping unreadable file '%s': %s", file_path, err.strerror or err)
                continue
            result.append(FSEntry.from_stat(file_path, info))
    return result
