import logging
import os
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional

from crcgen.walker import FSEntry

logger = logging.getLogger(__name__)


def _basename(path: str) -> str:
    stripped = path.rstrip('/\\')
    if not stripped:
        return path
    return os.path.basename(stripped)


def _is_inside(root: str, path: str) -> bool:
    try:
        return path != root and os.path.commonpath([root, path]) == root
    except ValueError:
        return False


def _depth(path: str) -> int:
    return len(path.rstrip(os.sep).split(os.sep))


def _expect(data: Any, key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if kind is int and isinstance(value, bool):
        raise TypeError(f"field '{key}' must be {kind.__name__}, got bool")
    if not isinstance(value, kind):
        raise TypeError(f"field '{key}' must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass
class FileEntry:
    """Single file of a manifest.

    Attributes
    ----------
    path : str
        Full file path.
    checksums : dict[str, str]
        Digest per algorithm name, empty string if not computed yet.
    size : int
        Size in bytes.
    last_modified : int
        Modification time as epoch seconds, 0 if unknown.
    """

    path: str
    checksums: dict[str, str] = field(default_factory=dict)
    size: int = 0
    last_modified: int = 0

    @property
    def name(self) -> str:
        return _basename(self.path)

    def to_dict(self) -> dict[str, Any]:
        return {
            'Path': self.path,
            'Checksums': dict(self.checksums),
            'Size': self.size,
            'LastMod': self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'FileEntry':
        if not isinstance(data, dict):
            raise TypeError(f'file entry must be a mapping, got {type(data).__name__}')
        checksums = _expect(data, 'Checksums', dict, {})
        for algorithm, digest in checksums.items():
            if not isinstance(algorithm, str) or not isinstance(digest, str):
                raise TypeError(f"checksum '{algorithm}' must map a string to a string")
        size = _expect(data, 'Size', int, 0)
        if size < 0:
            raise ValueError(f'file size must be non-negative, got {size}')
        return cls(
            path=_expect(data, 'Path', str, ''),
            checksums=dict(checksums),
            size=size,
            last_modified=_expect(data, 'LastMod', int, 0),
        )


@dataclass
class DirEntry:
    """Directory node owning its sub-directories and files.

    Attributes
    ----------
    path : str
        Full directory path.
    subdirs : list[DirEntry]
        Sub-directories, in order.
    files : list[FileEntry]
        Files directly inside the directory, in order.
    last_modified : int
        Latest modification time in the subtree, 0 if not computed yet.
    """

    path: str = ''
    subdirs: list['DirEntry'] = field(default_factory=list)
    files: list[FileEntry] = field(default_factory=list)
    last_modified: int = 0

    @property
    def name(self) -> str:
        return _basename(self.path)

    @classmethod
    def construct(
        cls,
        name: str,
        parent_path: str,
        subdirs: Optional[list['DirEntry']] = None,
        files: Optional[list[FileEntry]] = None,
        last_modified: int = 0
    ) -> 'DirEntry':
        """Create directory node with a resolved modification time.

        Parameters
        ----------
        name : str
            Directory name, joined onto `parent_path` when non-empty.
        parent_path : str
            Parent directory path, or the full path when `name` is empty.
        subdirs : list[DirEntry], optional
            Sub-directories.
        files : list[FileEntry], optional
            Files.
        last_modified : int, default=0
            Explicit modification time, computed from children when 0.

        Returns
        -------
        DirEntry
            Directory node.
        """
        path = os.path.join(parent_path, name) if name else parent_path
        entry = cls(
            path=path,
            subdirs=list(subdirs) if subdirs is not None else [],
            files=list(files) if files is not None else [],
            last_modified=last_modified,
        )
        entry.compute_last_modified()
        return entry

    def compute_last_modified(self) -> int:
        """Aggregate latest modification time of the subtree.

        A non-zero value already stored on a node is returned as is and its
        children are not visited. Otherwise the maximum over direct files and
        (computed) sub-directories is stored on the node.

        Returns
        -------
        int
            Modification time as epoch seconds.
        """
        if self.last_modified:
            return self.last_modified
        stack = [(self, False)]
        while stack:
            node, visited = stack.pop()
            if node.last_modified:
                continue
            if not visited:
                stack.append((node, True))
                stack.extend((subdir, False) for subdir in node.subdirs if not subdir.last_modified)
                continue
            latest = max((file.last_modified for file in node.files), default=0)
            for subdir in node.subdirs:
                latest = max(latest, subdir.last_modified)
            node.last_modified = latest
        return self.last_modified

    def iter_files(self) -> Iterator[FileEntry]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield from node.files
            stack.extend(reversed(node.subdirs))

    def to_dict(self) -> dict[str, Any]:
        return {
            'Path': self.path,
            'Dirs': [subdir.to_dict() for subdir in self.subdirs],
            'Files': [file.to_dict() for file in self.files],
            'LastMod': self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'DirEntry':
        if not isinstance(data, dict):
            raise TypeError(f'directory entry must be a mapping, got {type(data).__name__}')
        return cls(
            path=_expect(data, 'Path', str, ''),
            subdirs=[cls.from_dict(item) for item in _expect(data, 'Dirs', list, [])],
            files=[FileEntry.from_dict(item) for item in _expect(data, 'Files', list, [])],
            last_modified=_expect(data, 'LastMod', int, 0),
        )


def assemble_tree(root: str, entries: Iterable[FSEntry], algorithms: Iterable[str] = ()) -> DirEntry:
    """Build a directory tree from scanned entries.

    Parameters
    ----------
    root : str
        Root directory path.
    entries : Iterable[FSEntry]
        Files and directories found under `root`.
    algorithms : Iterable[str], default=()
        Checksum names seeded with an empty digest on every file.

    Returns
    -------
    DirEntry
        Root directory with aggregated modification times.
    """
    root = os.path.abspath(root)
    algorithms = list(algorithms)
    children: defaultdict[str, set[str]] = defaultdict(set)
    files: defaultdict[str, list[FileEntry]] = defaultdict(list)

    def attach(directory: str) -> None:
        while directory != root:
            parent = os.path.dirname(directory)
            children[parent].add(directory)
            directory = parent

    for entry in entries:
        path = os.path.abspath(entry.path)
        if not _is_inside(root, path):
            logger.warning("skipping entry outside of root '%s': '%s'", root, entry.path)
            continue
        if entry.type == 'dir':
            attach(path)
        else:
            parent = os.path.dirname(path)
            attach(parent)
            files[parent].append(FileEntry(
                path=path,
                checksums={algorithm: '' for algorithm in algorithms},
                size=entry.size or 0,
                last_modified=entry.last_modified or 0,
            ))

    # deepest directories first, so every child is built before its parent
    directories = {root}.union(*children.values())
    built: dict[str, DirEntry] = {}
    for directory in sorted(directories, key=_depth, reverse=True):
        built[directory] = DirEntry.construct(
            name='',
            parent_path=directory,
            subdirs=[built.pop(child) for child in sorted(children[directory])],
            files=sorted(files[directory], key=lambda file: file.path),
        )
    return built[root]
