from abc import ABC, abstractmethod

from crcgen.tree import DirEntry


class CodecError(Exception):
    """Base class for codec errors."""


class EncodeError(CodecError):
    """Tree could not be encoded."""


class DecodeError(CodecError):
    """Bytes could not be decoded into a tree."""


class Codec(ABC):
    """Abstract class for manifest codec."""

    @abstractmethod
    def encode(self, tree: DirEntry, indent: bool = False) -> bytes:
        """Encode tree.

        Parameters
        ----------
        tree : DirEntry
            Root directory.
        indent : bool, default=False
            Produce human-readable, indented output.

        Returns
        -------
        bytes
            Encoded manifest.

        Raises
        ------
        EncodeError
            If the tree can not be encoded.
        """
        pass

    @abstractmethod
    def decode(self, data: bytes) -> DirEntry:
        """Decode tree.

        Parameters
        ----------
        data : bytes
            Encoded manifest.

        Returns
        -------
        DirEntry
            Root directory.

        Raises
        ------
        DecodeError
            If the data is malformed or does not describe a tree.
        """
        pass

    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """File extensions handled by the codec.

        Returns
        -------
        set[str]
            Extensions, matched case-insensitively.
        """
        pass
