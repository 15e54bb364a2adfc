import yaml

from crcgen.codecs.codec import Codec, DecodeError, EncodeError
from crcgen.tree import DirEntry


class YamlCodec(Codec):
    """YAML manifest codec."""

    def encode(self, tree: DirEntry, indent: bool = False) -> bytes:
        try:
            text = yaml.safe_dump(
                tree.to_dict(),
                sort_keys=False,
                allow_unicode=True,
                default_flow_style=not indent,
                indent=2 if indent else None,
                width=80 if indent else float('inf'),
            )
            return text.encode('utf-8')
        except (yaml.YAMLError, UnicodeError, RecursionError) as err:
            raise EncodeError(f'could not encode tree as YAML: {err}') from err

    def decode(self, data: bytes) -> DirEntry:
        try:
            return DirEntry.from_dict(yaml.safe_load(data))
        except (yaml.YAMLError, TypeError, ValueError, RecursionError) as err:
            raise DecodeError(f'could not decode YAML manifest: {err}') from err

    def supported_extensions(self) -> set[str]:
        return {'yaml', 'yml'}
