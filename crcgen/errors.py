import enum
from typing import Optional


class ErrorKind(enum.Enum):
    """Failure categories raised by the manifest store."""

    INVALID_FILE = 'InvalidFile'
    INVALID_EXTENSION = 'InvalidExtension'
    ABS_PATH_RESOLUTION = 'AbsPathResolution'
    PATH_IS_DIRECTORY = 'PathIsDirectory'
    NOT_WRITABLE = 'NotWritable'
    READ_FAILURE = 'ReadFailure'
    HANDLER_NOT_FOUND = 'HandlerNotFound'
    NOT_STARTED = 'NotStarted'


class ManifestError(Exception):
    """Base class for manifest store errors.

    Attributes
    ----------
    kind : ErrorKind
        Failure category.
    path : str, optional
        Path the failure relates to.
    """

    kind: ErrorKind

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is not None:
            return f"{message}: '{self.path}'"
        return message


class InvalidFileError(ManifestError):
    kind = ErrorKind.INVALID_FILE


class InvalidExtensionError(ManifestError):
    kind = ErrorKind.INVALID_EXTENSION


class AbsPathResolutionError(ManifestError):
    kind = ErrorKind.ABS_PATH_RESOLUTION


class PathIsDirectoryError(ManifestError):
    kind = ErrorKind.PATH_IS_DIRECTORY


class NotWritableError(ManifestError):
    kind = ErrorKind.NOT_WRITABLE


class ReadFailureError(ManifestError):
    kind = ErrorKind.READ_FAILURE


class HandlerNotFoundError(ManifestError):
    kind = ErrorKind.HANDLER_NOT_FOUND


class NotStartedError(ManifestError):
    kind = ErrorKind.NOT_STARTED
