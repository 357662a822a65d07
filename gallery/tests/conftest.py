"""
Pytest fixtures for gallery tests.
"""

import os

import pytest
from PIL import Image


@pytest.fixture
def album_path(tmp_path):
    """
    Fixture providing an album folder on disk:

        album/a.jpg  album/b.png  album/notes.txt  album/trip/c.jpg
    """
    album = tmp_path / 'album'
    album.mkdir()
    Image.new('RGB', (640, 480), color='red').save(str(album / 'a.jpg'), format='JPEG')
    Image.new('RGBA', (300, 600), color=(0, 255, 0, 128)).save(str(album / 'b.png'), format='PNG')
    (album / 'notes.txt').write_text('not a picture')

    trip = album / 'trip'
    trip.mkdir()
    Image.new('RGB', (400, 300), color='blue').save(str(trip / 'c.jpg'), format='JPEG')
    return str(album)


@pytest.fixture
def config(album_path):
    """Fixture providing an album configuration that skips thumbnail pregeneration."""
    from gallery.config import AlbumConfig

    return AlbumConfig(album_path=album_path, pregenerate_thumbnails=False)


@pytest.fixture
def builder(config, logger):
    """Fixture providing a GroupBuilder over the album fixture."""
    from gallery.builder import GroupBuilder

    return GroupBuilder(config, logger=logger)


@pytest.fixture
def sample_tree():
    """
    Fixture providing an in-memory tree (nothing on disk):

        /album              a.jpg, b.png   sizes 320x213
        /album/trip         c.jpg          sizes 100x100
        /album/zoo                         sizes inherited
    """
    from gallery.models import Group, ImageItem, ThumbSize

    root = Group(path='/album', title='Holidays', allowed_thumb_sizes=[ThumbSize(320, 213)])
    root.add_picture(ImageItem(path='/album/a.jpg', file_name='a.jpg', title='First'))
    root.add_picture(ImageItem(path='/album/b.png', file_name='b.png'))

    trip = Group(path='/album/trip', allowed_thumb_sizes=[ThumbSize(100, 100)])
    trip.add_picture(ImageItem(path='/album/trip/c.jpg', file_name='c.jpg'))
    root.add_sub_group(trip)

    zoo = Group(path='/album/zoo', allowed_thumb_sizes=[ThumbSize(320, 213)])
    root.add_sub_group(zoo)
    return root


@pytest.fixture
def read_sidecar():
    """Fixture providing a helper returning a folder's parsed sidecar."""
    import json

    def _read(folder):
        with open(os.path.join(folder, 'metadata.json'), encoding='utf-8') as f:
            return json.load(f)
    return _read


@pytest.fixture
def write_sidecar():
    """Fixture providing a helper replacing a folder's sidecar."""
    import json

    def _write(folder, data):
        with open(os.path.join(folder, 'metadata.json'), 'w', encoding='utf-8') as f:
            json.dump(data, f)
    return _write


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
