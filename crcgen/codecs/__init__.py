from crcgen.codecs.codec import Codec, CodecError, DecodeError, EncodeError
from crcgen.codecs.json_codec import JsonCodec
from crcgen.codecs.registry import CodecRegistry, default_registry, normalize_extension
from crcgen.codecs.yaml_codec import YamlCodec
