"""Tests for CLI module."""

import json
import logging
import os
import signal

import pytest

from gallery.cli import create_parser, get_config, main, parse_meta, start_reload
from gallery.errors import GalleryError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep GALLERY_* variables of the calling shell out of the tests."""
    for name in list(os.environ):
        if name.startswith('GALLERY_'):
            monkeypatch.delenv(name)


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_created(self):
        assert create_parser() is not None

    def test_build_command(self):
        args = create_parser().parse_args(['build', '/srv/album', '--no-recursive'])

        assert args.command == 'build'
        assert args.album == '/srv/album'
        assert args.no_recursive is True

    def test_serve_command(self):
        """Test serve command parsing."""
        args = create_parser().parse_args([
            'serve', '/srv/album', '--theme', '/srv/theme',
            '--port', '9000', '--meta', 'site=Photos', '--meta', 'owner=Ann',
        ])

        assert args.command == 'serve'
        assert args.theme == '/srv/theme'
        assert args.port == 9000
        assert args.meta == ['site=Photos', 'owner=Ann']

    def test_create_theme_command(self):
        args = create_parser().parse_args(['create-theme', '/srv/theme', '--name', 'dark'])

        assert args.command == 'create-theme'
        assert args.path == '/srv/theme'
        assert args.name == 'dark'


class TestGetConfig:

    def test_overrides(self, tmp_path):
        args = create_parser().parse_args([
            'serve', str(tmp_path), '--host', '127.0.0.1', '--port', '9000', '--no-recursive',
        ])

        config = get_config(args)

        assert config.album_path == str(tmp_path)
        assert config.host == '127.0.0.1'
        assert config.port == 9000
        assert config.recursive is False


class TestParseMeta:

    def test_pairs(self):
        assert parse_meta(['site=Photos', 'motto = a=b ']) == {'site': 'Photos', 'motto': 'a=b'}
        assert parse_meta(None) == {}

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_meta(['nonsense'])


class TestMain:
    """Tests for main entry point."""

    def test_no_command(self):
        assert main([]) == 1

    def test_build(self, album_path, capsys):
        """Test build writes sidecars and thumbnails."""
        assert main(['build', album_path]) == 0

        assert os.path.isfile(os.path.join(album_path, 'metadata.json'))
        assert os.path.isfile(os.path.join(album_path, 'a.jpg_320_x_213'))
        assert 'Folders created: 2' in capsys.readouterr().out

    def test_build_invalid_album(self, tmp_path):
        assert main(['build', str(tmp_path / 'missing')]) == 1

    def test_build_malformed_sidecar(self, album_path):
        with open(os.path.join(album_path, 'metadata.json'), 'w') as f:
            f.write('{')

        assert main(['build', '-q', album_path]) == 1

    def test_update(self, album_path):
        """Test update flags pictures removed since the build."""
        assert main(['build', '-q', '--no-thumbnails', album_path]) == 0
        os.remove(os.path.join(album_path, 'b.png'))

        assert main(['update', '-q', album_path]) == 0

        with open(os.path.join(album_path, 'metadata.json')) as f:
            assert json.load(f)['pictures']['b.png']['existing'] is False

    def test_create_theme(self, tmp_path):
        path = str(tmp_path / 'theme')

        assert main(['create-theme', path, '--name', 'dark']) == 0

        assert os.path.isfile(os.path.join(path, 'templates', 'page.tpl'))

    def test_create_theme_over_file(self, tmp_path):
        target = tmp_path / 'theme'
        target.write_text('x')

        assert main(['create-theme', str(target)]) == 1

    def test_serve(self, album_path, mocker):
        """Test serve builds the album and starts the server."""
        serve = mocker.patch('gallery.server.AlbumServer.serve')
        mocker.patch('gallery.cli.signal.signal')

        assert main(['serve', '--no-thumbnails', album_path, '--meta', 'site=Photos']) == 0

        serve.assert_called_once()
        assert os.path.isfile(os.path.join(album_path, 'metadata.json'))

    def test_serve_bad_meta(self, album_path, mocker):
        serve = mocker.patch('gallery.server.AlbumServer.serve')

        assert main(['serve', album_path, '--meta', 'nonsense']) == 1
        serve.assert_not_called()

    def test_serve_missing_theme(self, album_path, tmp_path, mocker):
        serve = mocker.patch('gallery.server.AlbumServer.serve')

        assert main(['serve', album_path, '--theme', str(tmp_path / 'nope')]) == 1
        serve.assert_not_called()


class TestStartReload:
    """Tests for reloading the album off the serving thread."""

    def test_reload_in_background(self, mocker):
        tree = mocker.Mock()

        thread = start_reload(tree, logging.getLogger('test'))
        thread.join(timeout=5)

        assert thread.name == 'album-reload'
        assert thread.daemon
        tree.reload.assert_called_once_with()

    def test_failed_reload_logged(self, mocker):
        """Test a failing reload is logged and the previous tree stays published."""
        tree = mocker.Mock()
        tree.reload.side_effect = GalleryError('boom')
        logger = mocker.Mock()

        start_reload(tree, logger).join(timeout=5)

        logger.error.assert_called_once()
        assert 'boom' in logger.error.call_args.args[0]

    @pytest.mark.skipif(not hasattr(signal, 'SIGHUP'), reason='no SIGHUP on this platform')
    def test_sighup_starts_reload(self, album_path, mocker):
        """Test the SIGHUP handler hands the reload to a worker thread."""
        mocker.patch('gallery.server.AlbumServer.serve')
        handlers = {}
        mocker.patch(
            'gallery.cli.signal.signal',
            side_effect=lambda signum, handler: handlers.setdefault(signum, handler),
        )
        start = mocker.patch('gallery.cli.start_reload')

        assert main(['serve', '--no-thumbnails', album_path]) == 0

        handler = next(iter(handlers.values()))
        handler(1, None)
        start.assert_called_once()
