import logging
import zlib
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from tqdm.auto import tqdm

from crcgen.tree import DirEntry

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024 * 16


class ChecksumAlgorithm(ABC):
    """Abstract class for file checksum."""

    name: str

    @abstractmethod
    def calculate(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE, progress: Optional[tqdm] = None) -> str:
        """Calculate file digest.

        Parameters
        ----------
        path : str
            Path to file.
        chunk_size : int, default=1024 * 1024 * 16
            Read size in bytes.
        progress : tqdm, optional
            Bytes progress bar updated after every chunk.

        Returns
        -------
        str
            Hex digest.
        """
        pass


class CRC32(ChecksumAlgorithm):
    """CRC-32 checksum, IEEE polynomial."""

    name = 'CRC32'

    def calculate(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE, progress: Optional[tqdm] = None) -> str:
        value = 0
        with open(path, 'rb') as f:
            chunk = f.read(chunk_size)
            while chunk:
                value = zlib.crc32(chunk, value)
                if progress is not None:
                    progress.update(len(chunk))
                chunk = f.read(chunk_size)
        return f'{value & 0xFFFFFFFF:08x}'


ALGORITHMS: dict[str, ChecksumAlgorithm] = {
    CRC32.name: CRC32(),
}


def get_algorithm(name: str) -> ChecksumAlgorithm:
    try:
        return ALGORITHMS[name.strip().upper()]
    except KeyError:
        raise ValueError(f"unknown checksum algorithm: '{name}'") from None


def fill_checksums(
    tree: DirEntry,
    algorithms: Iterable[str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress: bool = False
) -> list[str]:
    """Compute digests for every file of a tree, in place.

    Parameters
    ----------
    tree : DirEntry
        Root directory.
    algorithms : Iterable[str]
        Algorithm names.
    chunk_size : int, default=1024 * 1024 * 16
        Read size in bytes.
    progress : bool, default=False
        Show files/bytes progress bars.

    Returns
    -------
    list[str]
        Error files, their digests are left empty.
    """
    selected = [get_algorithm(name) for name in algorithms]
    files = list(tree.iter_files())
    files_pbar = tqdm(total=len(files), desc='Files', disable=not progress)
    bytes_pbar = tqdm(total=sum(file.size for file in files) * len(selected), desc='Bytes',
                      unit='B', unit_scale=True, disable=not progress)
    error_files = []
    try:
        for file in files:
            for algorithm in selected:
                try:
                    file.checksums[algorithm.name] = algorithm.calculate(file.path, chunk_size, bytes_pbar)
                except OSError as err:
                    logger.error("could not read '%s': %s", file.path, err.strerror or err)
                    file.checksums.update({item.name: '' for item in selected})
                    error_files.append(file.path)
                    break
            files_pbar.update(1)
    finally:
        files_pbar.close()
        bytes_pbar.close()
    return error_files
