import logging
from typing import Optional

from crcgen.codecs.codec import Codec
from crcgen.codecs.json_codec import JsonCodec
from crcgen.codecs.yaml_codec import YamlCodec


def normalize_extension(extension: str) -> str:
    """Normalize file extension for registry lookups.

    Parameters
    ----------
    extension : str
        Raw extension, e.g. ``' .JSon '``.

    Returns
    -------
    str
        Lower-cased extension without dots and spaces, e.g. ``'json'``.
    """
    return extension.strip().lstrip('.').strip().lower()


class CodecRegistry:
    """Extension to codec mapping.

    Registering an extension twice replaces the previous codec.

    Attributes
    ----------
    logger : logging.Logger
        Logger for diagnostic events.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._codecs: dict[str, Codec] = {}

    def register(self, codec: Codec) -> None:
        for extension in codec.supported_extensions():
            key = normalize_extension(extension)
            if not key:
                continue
            previous = self._codecs.get(key)
            if previous is not None:
                self.logger.debug(
                    "extension '%s' already handled by %s, replacing with %s",
                    key, type(previous).__name__, type(codec).__name__
                )
            self._codecs[key] = codec

    def is_supported(self, extension: str) -> bool:
        return normalize_extension(extension) in self._codecs

    def lookup(self, extension: str) -> Optional[Codec]:
        return self._codecs.get(normalize_extension(extension))

    def extensions(self) -> set[str]:
        return set(self._codecs)


def default_registry(logger: Optional[logging.Logger] = None) -> CodecRegistry:
    """Registry with the JSON and YAML codecs."""
    registry = CodecRegistry(logger)
    registry.register(JsonCodec())
    registry.register(YamlCodec())
    return registry
