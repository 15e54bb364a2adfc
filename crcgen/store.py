import logging
import os
import stat
import tempfile
import threading
from typing import Optional

from crcgen.codecs import CodecRegistry, DecodeError, default_registry, normalize_extension
from crcgen.errors import (
    AbsPathResolutionError,
    HandlerNotFoundError,
    InvalidExtensionError,
    InvalidFileError,
    NotStartedError,
    NotWritableError,
    PathIsDirectoryError,
    ReadFailureError,
)
from crcgen.tree import DirEntry

FILE_MODE = 0o600


class ManifestStore:
    """Manifest file bound to an in-memory directory tree.

    `start` validates the manifest path and loads the file once; later calls
    return (or raise) the outcome of the first one. `write` replaces the file
    with a full encoding of a tree.

    Attributes
    ----------
    registry : CodecRegistry
        Codecs selected by the manifest file extension.
    logger : logging.Logger
        Logger for diagnostic events.
    atomic : bool
        Write through a temporary file renamed over the manifest.
    """

    def __init__(
        self,
        registry: CodecRegistry,
        logger: Optional[logging.Logger] = None,
        atomic: bool = False
    ):
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)
        self.atomic = atomic
        self._lock = threading.Lock()
        self._done = False
        self._error: Optional[BaseException] = None
        self._path: Optional[str] = None
        self._extension: Optional[str] = None
        self._root = DirEntry()

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def extension(self) -> Optional[str]:
        return self._extension

    @property
    def root(self) -> DirEntry:
        return self._root

    @property
    def started(self) -> bool:
        return self._done and self._error is None

    def start(self, raw_path: str) -> None:
        """Initialize the store, at most once.

        Parameters
        ----------
        raw_path : str
            Manifest file path. Ignored on every call after the first one.

        Raises
        ------
        ManifestError
            The error of the first call, raised again on every later call.
        """
        with self._lock:
            if not self._done:
                try:
                    self._initialize(raw_path)
                except BaseException as err:
                    self._error = err
                finally:
                    self._done = True
        if self._error is not None:
            raise self._error

    def write(self, tree: DirEntry) -> None:
        """Replace the manifest file with an indented encoding of `tree`.

        Parameters
        ----------
        tree : DirEntry
            Complete tree to persist.

        Raises
        ------
        NotStartedError
            If `start` did not succeed.
        HandlerNotFoundError
            If no codec handles the manifest extension.
        EncodeError
            If the codec rejects the tree.
        NotWritableError
            If the file can not be written.
        """
        if self._path is None or self._extension is None:
            raise NotStartedError('manifest store is not started')
        codec = self.registry.lookup(self._extension)
        if codec is None:
            raise HandlerNotFoundError(f"no codec registered for extension '{self._extension}'", self._path)
        data = codec.encode(tree, indent=True)
        try:
            if self.atomic:
                self._replace(data)
            else:
                self._overwrite(data)
        except OSError as err:
            raise NotWritableError(f'could not write manifest ({err.strerror or err})', self._path) from err
        self.logger.debug("wrote %d bytes to '%s'", len(data), self._path)
        self._root = tree

    def _initialize(self, raw_path: str) -> None:
        path, extension = self._resolve_path(raw_path)
        self._ensure_file(path)
        self._root = self._read(path, extension)
        self._path = path
        self._extension = extension

    def _resolve_path(self, raw_path: str) -> tuple[str, str]:
        directory, filename = os.path.split(raw_path)
        if not filename:
            raise InvalidFileError('could not detect manifest file in path', raw_path)

        _, dot, extension = filename.rpartition('.')
        extension = normalize_extension(extension) if dot else ''
        if not extension or not self.registry.is_supported(extension):
            raise InvalidExtensionError('manifest file has invalid extension', raw_path)

        if not directory:
            self.logger.debug("no directory in '%s', defaulting to working directory", raw_path)
        try:
            path = os.path.abspath(raw_path)
        except (OSError, ValueError) as err:
            raise AbsPathResolutionError("couldn't convert path to absolute", raw_path) from err
        return path, extension

    def _ensure_file(self, path: str) -> None:
        try:
            info = os.stat(path)
        except FileNotFoundError:
            self.logger.debug("creating manifest file '%s'", path)
            try:
                os.close(os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_MODE))
            except OSError as err:
                raise NotWritableError(f'could not create manifest ({err.strerror or err})', path) from err
            return
        except ValueError as err:
            raise InvalidFileError('manifest path is not a valid file name', path) from err
        except OSError as err:
            raise NotWritableError(f'could not access manifest ({err.strerror or err})', path) from err
        if stat.S_ISDIR(info.st_mode):
            raise PathIsDirectoryError('manifest path is a directory', path)

    def _read(self, path: str, extension: str) -> DirEntry:
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as err:
            raise ReadFailureError(f'could not read manifest ({err.strerror or err})', path) from err
        if not data:
            self.logger.debug("manifest '%s' is empty, starting with an empty tree", path)
            return DirEntry()
        codec = self.registry.lookup(extension)
        if codec is None:
            raise HandlerNotFoundError(f"no codec registered for extension '{extension}'", path)
        try:
            return codec.decode(data)
        except DecodeError as err:
            raise ReadFailureError(f'could not decode manifest ({err})', path) from err

    def _overwrite(self, data: bytes) -> None:
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, 'wb') as f:
            f.write(data)

    def _replace(self, data: bytes) -> None:
        directory, filename = os.path.split(self._path)
        fd, tmp_path = tempfile.mkstemp(prefix=f'.{filename}.', suffix='.tmp', dir=directory)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


_default_store: Optional[ManifestStore] = None
_default_lock = threading.Lock()


def default_store() -> ManifestStore:
    """Process-wide store backed by the default codec registry."""
    global _default_store
    with _default_lock:
        if _default_store is None:
            _default_store = ManifestStore(default_registry())
        return _default_store


def start(raw_path: str) -> None:
    default_store().start(raw_path)


def write(tree: DirEntry) -> None:
    default_store().write(tree)
