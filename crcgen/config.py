import dataclasses
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

import yaml

from crcgen.checksum import DEFAULT_CHUNK_SIZE

DEBUG_ENV = 'CRCGEN_DEBUG'


@dataclass
class Config:
    """Application settings.

    Attributes
    ----------
    algorithms : list[str]
        Checksum algorithms computed for every file.
    show_hidden : bool
        Include hidden files and directories.
    chunk_size : int
        Read size in bytes used for checksums.
    atomic_write : bool
        Replace the manifest through a temporary file.
    progress : bool
        Show progress bars.
    log_level : str
        Logging level name.
    log_file : str, optional
        Write logs to this file instead of stderr.
    """

    algorithms: list[str] = field(default_factory=lambda: ['CRC32'])
    show_hidden: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE
    atomic_write: bool = False
    progress: bool = True
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    @classmethod
    def from_yaml(cls, path: str) -> 'Config':
        """Creates class instance from configuration path.

        Parameters
        ----------
        path : str
            path to configuration file.

        Returns
        -------
        Config
            Class instance.
        """
        with open(path) as f:
            config = yaml.safe_load(f) or {}
        if not isinstance(config, dict):
            raise ValueError(f"configuration file must contain a mapping: '{path}'")
        known = {item.name for item in dataclasses.fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"unknown configuration fields in '{path}': {', '.join(map(str, unknown))}")
        if config.get('chunk_size') is not None and config['chunk_size'] <= 0:
            raise ValueError(f"'chunk_size' must be positive, got {config['chunk_size']}")
        return cls(**config)


def debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return DEBUG_ENV in environ
