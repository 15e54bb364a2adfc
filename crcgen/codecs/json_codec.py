import json

from crcgen.codecs.codec import Codec, DecodeError, EncodeError
from crcgen.tree import DirEntry

# undecodable file name bytes are kept as lone surrogates, see os.fsdecode
ENCODING_ERRORS = 'surrogateescape'


class JsonCodec(Codec):
    """JSON manifest codec."""

    def encode(self, tree: DirEntry, indent: bool = False) -> bytes:
        try:
            if indent:
                text = json.dumps(tree.to_dict(), indent='\t', ensure_ascii=False)
            else:
                text = json.dumps(tree.to_dict(), separators=(',', ':'), ensure_ascii=False)
            return text.encode('utf-8', ENCODING_ERRORS)
        except (TypeError, ValueError, RecursionError) as err:
            raise EncodeError(f'could not encode tree as JSON: {err}') from err

    def decode(self, data: bytes) -> DirEntry:
        try:
            return DirEntry.from_dict(json.loads(data.decode('utf-8', ENCODING_ERRORS)))
        except (TypeError, ValueError, RecursionError) as err:
            raise DecodeError(f'could not decode JSON manifest: {err}') from err

    def supported_extensions(self) -> set[str]:
        return {'json'}
