import argparse
import logging
import os
import sys
from typing import Optional

import yaml

from crcgen.checksum import fill_checksums
from crcgen.codecs import CodecError, default_registry
from crcgen.config import Config, debug_enabled
from crcgen.errors import ManifestError
from crcgen.logger import setup_logging
from crcgen.store import ManifestStore
from crcgen.tree import assemble_tree
from crcgen.version import __version__
from crcgen.walker import scan_directory

logger = logging.getLogger(__name__)

EXIT_FILES_FAILED = 1
EXIT_RUN_FAILED = 2
EXIT_STARTUP_FAILED = 10


class CLI:
    """Checksum manifest generator.

    Attributes
    ----------
    store : ManifestStore
        Started manifest store.
    config : Config
        Application settings.
    """

    def __init__(self, store: ManifestStore, config: Config):
        self.store = store
        self.config = config

    def generate(self, path: str) -> list[str]:
        """Scan a directory, compute checksums and write the manifest.

        Parameters
        ----------
        path : str
            Directory path.

        Returns
        -------
        list[str]
            Error files.
        """
        entries = [
            entry for entry in scan_directory(path, show_hidden=self.config.show_hidden)
            if os.path.abspath(entry.path) != self.store.path
        ]
        tree = assemble_tree(path, entries, self.config.algorithms)
        logger.info("found %d entries under '%s'", len(entries), tree.path)
        error_files = fill_checksums(
            tree, self.config.algorithms,
            chunk_size=self.config.chunk_size, progress=self.config.progress
        )
        self.store.write(tree)
        logger.info("manifest written to '%s'", self.store.path)
        return error_files

    def show(self) -> str:
        lines = []
        stack = [(self.store.root, 0)]
        while stack:
            node, depth = stack.pop()
            pad = '  ' * depth
            lines.append(f'{pad}{node.name}/ (last modified {node.last_modified})')
            for file in node.files:
                checksums = ' '.join(f'{name}={digest or "-"}' for name, digest in file.checksums.items())
                lines.append(f'{pad}  {file.name} {file.size} {file.last_modified} {checksums}'.rstrip())
            stack.extend((subdir, depth + 1) for subdir in reversed(node.subdirs))
        return '\n'.join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='crcgen',
        description='batch generates file checksums for files in a directory',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='to see action help message:\n  crcgen crc32 -h\n  crcgen show -h'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s v{__version__}')
    parser.add_argument('--config', type=str, default=None, help='path to configuration file')
    parser.add_argument('--debug', action='store_true', help='log debug messages')
    subparsers = parser.add_subparsers(dest='action')
    subparsers.required = True

    crc32_parser = subparsers.add_parser('crc32', help='generate CRC-32 checksums for a directory')
    crc32_parser.add_argument('path', type=str, help='root directory')
    crc32_parser.add_argument('--output', required=True, type=str, help='manifest file (.json, .yaml, .yml)')
    crc32_parser.add_argument('--hidden', action=argparse.BooleanOptionalAction, default=None,
                              help='include hidden files')
    crc32_parser.add_argument('--no-progress', action='store_true', help='hide progress bars')
    crc32_parser.add_argument('--atomic', action='store_true', help='replace manifest through a temporary file')

    show_parser = subparsers.add_parser('show', help='print a manifest')
    show_parser.add_argument('manifest', type=str, help='manifest file')
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = Config.from_yaml(args.config) if args.config else Config()
    except (OSError, ValueError, TypeError, yaml.YAMLError) as err:
        setup_logging()
        logger.error('could not load configuration: %s', err)
        return EXIT_STARTUP_FAILED
    if args.action == 'crc32':
        config.algorithms = ['CRC32']
        if args.hidden is not None:
            config.show_hidden = args.hidden
        if args.no_progress:
            config.progress = False
        if args.atomic:
            config.atomic_write = True
    level = 'DEBUG' if args.debug or debug_enabled() else config.log_level
    setup_logging(level, config.log_file)
    logger.debug('running in debug mode')

    store = ManifestStore(default_registry(), atomic=config.atomic_write)
    manifest = args.output if args.action == 'crc32' else args.manifest
    try:
        store.start(manifest)
    except ManifestError as err:
        logger.error('could not open manifest (%s): %s', err.kind.value, err)
        return EXIT_STARTUP_FAILED

    cli = CLI(store, config)
    if args.action == 'crc32':
        try:
            error_files = cli.generate(args.path)
        except (FileNotFoundError, NotADirectoryError) as err:
            logger.error('%s', err)
            return EXIT_RUN_FAILED
        except ManifestError as err:
            logger.error('could not write manifest (%s): %s', err.kind.value, err)
            return EXIT_RUN_FAILED
        except CodecError as err:
            logger.error('could not write manifest: %s', err)
            return EXIT_RUN_FAILED
        if error_files:
            print(f'Error files: {error_files}')
            return EXIT_FILES_FAILED
    elif args.action == 'show':
        print(cli.show())
    else:
        raise ValueError(f"invalid action: '{args.action}'")
    return 0


def run() -> None:
    sys.exit(main())
