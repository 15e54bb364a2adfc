from crcgen.codecs import Codec, CodecRegistry, DecodeError, EncodeError, JsonCodec, YamlCodec, default_registry
from crcgen.errors import ErrorKind, ManifestError
from crcgen.store import ManifestStore
from crcgen.tree import DirEntry, FileEntry, assemble_tree
from crcgen.version import __version__
