"""
Command Line Interface for building and serving albums.
"""

import argparse
import logging
import signal
import threading
from typing import Dict, List, Optional

from .builder import BuildStats, GroupBuilder
from .config import AlbumConfig
from .errors import GalleryError
from .live_tree import LiveTree
from .theme import Theme


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('gallery')


def get_config(args: argparse.Namespace) -> AlbumConfig:
    """Get album configuration from environment and CLI overrides."""
    config = AlbumConfig.from_env()

    if getattr(args, 'album', None):
        config.album_path = args.album
    if getattr(args, 'no_recursive', False):
        config.recursive = False
    if getattr(args, 'no_thumbnails', False):
        config.pregenerate_thumbnails = False
    if getattr(args, 'theme', None):
        config.theme_path = args.theme
    if getattr(args, 'host', None):
        config.host = args.host
    if getattr(args, 'port', None):
        config.port = args.port
    if getattr(args, 'server', None):
        config.server = args.server
    if getattr(args, 'debug', False):
        config.debug = True

    return config


def parse_meta(values: Optional[List[str]]) -> Dict[str, str]:
    """Turn KEY=VALUE arguments into a dictionary."""
    metadata = {}
    for value in values or []:
        key, sep, item = value.partition('=')
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {value!r}")
        metadata[key.strip()] = item.strip()
    return metadata


def _valid_config(args: argparse.Namespace, logger: logging.Logger) -> Optional[AlbumConfig]:
    config = get_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return None
    return config


def print_stats(stats: BuildStats) -> None:
    print()
    print(f"Folders loaded: {stats.folders_loaded}")
    print(f"Folders created: {stats.folders_created}")
    print(f"Folders updated: {stats.folders_updated}")
    print(f"Images added: {stats.images_added}")
    print(f"Images missing: {stats.images_missing}")
    print(f"Thumbnail failures: {stats.thumbnail_failures}")
    print(f"Time: {stats.elapsed_seconds:.1f}s")


def _load(args: argparse.Namespace, update: bool) -> int:
    logger = setup_logging(args.verbose)
    config = _valid_config(args, logger)
    if config is None:
        return 1

    builder = GroupBuilder(config, logger=logger)
    try:
        builder.load_album(update=update)
    except GalleryError as e:
        logger.error(f"Album {config.album_path} could not be loaded: {e}")
        return 1

    if not args.quiet:
        print_stats(builder.stats)
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    """Execute build command: create missing sidecars and thumbnails."""
    return _load(args, update=False)


def cmd_update(args: argparse.Namespace) -> int:
    """Execute update command: reconcile sidecars with the folders on disk."""
    return _load(args, update=True)


def start_reload(tree: LiveTree, logger: logging.Logger) -> threading.Thread:
    """Reload the album in a background thread so serving goes on meanwhile."""
    def reload_tree():
        try:
            tree.reload()
        except GalleryError as e:
            logger.error(f"Reload failed, still serving the previous tree: {e}")

    thread = threading.Thread(target=reload_tree, name='album-reload', daemon=True)
    thread.start()
    return thread


def cmd_serve(args: argparse.Namespace) -> int:
    """Execute serve command."""
    from .server import create_app

    logger = setup_logging(args.verbose)
    config = _valid_config(args, logger)
    if config is None:
        return 1

    try:
        metadata = parse_meta(args.meta)
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        theme = Theme.load(config.theme_path, logger=logger) if config.theme_path else None
        server = create_app(config, theme=theme, metadata=metadata, update=args.update, logger=logger)
    except GalleryError as e:
        logger.error(f"Cannot start server: {e}")
        return 1

    if hasattr(signal, 'SIGHUP'):
        def reload_album(signum, frame):
            start_reload(server.tree, logger)
        signal.signal(signal.SIGHUP, reload_album)

    try:
        server.serve()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    return 0


def cmd_create_theme(args: argparse.Namespace) -> int:
    """Execute create-theme command."""
    logger = setup_logging(args.verbose)
    theme = Theme(name=args.name, path=args.path, logger=logger)
    try:
        theme.create()
    except GalleryError as e:
        logger.error(f"Cannot create theme: {e}")
        return 1
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='gallery',
        description='Folder backed photo album',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  1. Build:   python -m gallery build /srv/album
  2. Curate:  edit the metadata.json file of each folder
  3. Serve:   python -m gallery serve /srv/album --theme /srv/theme

Run `update` after adding or removing pictures, or send SIGHUP to a
running server to reload the album.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Build command
    build_parser = subparsers.add_parser('build', help='Create missing sidecars and thumbnails')
    build_parser.add_argument('album', help='Album folder')
    build_parser.add_argument('--no-recursive', action='store_true', help='Ignore sub folders')
    build_parser.add_argument('--no-thumbnails', action='store_true',
                              help='Do not generate thumbnails while building')
    build_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress the summary')
    build_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Update command
    update_parser = subparsers.add_parser('update', help='Reconcile sidecars with the folders on disk')
    update_parser.add_argument('album', help='Album folder')
    update_parser.add_argument('--no-recursive', action='store_true', help='Ignore sub folders')
    update_parser.add_argument('--no-thumbnails', action='store_true',
                               help='Do not generate thumbnails for new pictures')
    update_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress the summary')
    update_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Serve the album over HTTP')
    serve_parser.add_argument('album', help='Album folder')
    serve_parser.add_argument('--theme', metavar='PATH', help='Theme folder (default: built in templates)')
    serve_parser.add_argument('--host', help='Override GALLERY_HOST (default: 0.0.0.0)')
    serve_parser.add_argument('--port', type=int, help='Override GALLERY_PORT (default: 8080)')
    serve_parser.add_argument('--server', help='Bottle server adapter (default: wsgiref)')
    serve_parser.add_argument('--no-recursive', action='store_true', help='Ignore sub folders')
    serve_parser.add_argument('--no-thumbnails', action='store_true',
                              help='Generate thumbnails only when requested')
    serve_parser.add_argument('-u', '--update', action='store_true',
                              help='Reconcile sidecars with disk before serving')
    serve_parser.add_argument('--meta', action='append', metavar='KEY=VALUE',
                              help='Site wide value passed to the templates')
    serve_parser.add_argument('--debug', action='store_true', help='Run Bottle in debug mode')
    serve_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    # Create-theme command
    theme_parser = subparsers.add_parser('create-theme', help='Create a theme folder with default templates')
    theme_parser.add_argument('path', help='Theme folder')
    theme_parser.add_argument('--name', default='default', help='Theme name (default: default)')
    theme_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'build':
        return cmd_build(parsed_args)
    elif parsed_args.command == 'update':
        return cmd_update(parsed_args)
    elif parsed_args.command == 'serve':
        return cmd_serve(parsed_args)
    elif parsed_args.command == 'create-theme':
        return cmd_create_theme(parsed_args)

    return 1
