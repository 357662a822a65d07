"""Tests for AlbumConfig."""

import pytest

from gallery.config import AlbumConfig, str2bool
from gallery.models import ThumbSize


class TestStr2Bool:

    @pytest.mark.parametrize('value', ['yes', 'True', ' t ', 'Y', '1'])
    def test_true(self, value):
        assert str2bool(value) is True

    @pytest.mark.parametrize('value', ['no', 'FALSE', 'f', 'n', '0'])
    def test_false(self, value):
        assert str2bool(value, default=True) is False

    def test_default(self):
        assert str2bool(None) is False
        assert str2bool('maybe', default=True) is True


class TestAlbumConfig:
    """Tests for AlbumConfig."""

    def test_defaults(self):
        config = AlbumConfig()

        assert config.host == '0.0.0.0'
        assert config.port == 8080
        assert config.server == 'wsgiref'
        assert config.recursive is True
        assert config.default_thumb_size == ThumbSize(320, 213)
        assert config.pregenerate_thumbnails is True

    def test_from_env(self, monkeypatch, tmp_path):
        """Test configuration from GALLERY_* environment variables."""
        monkeypatch.setenv('GALLERY_ALBUM_PATH', str(tmp_path))
        monkeypatch.setenv('GALLERY_PORT', '9000')
        monkeypatch.setenv('GALLERY_RECURSIVE', 'no')
        monkeypatch.setenv('GALLERY_THUMB_WIDTH', '200')
        monkeypatch.setenv('GALLERY_THUMB_HEIGHT', '150')
        monkeypatch.setenv('GALLERY_PREGENERATE', 'false')
        monkeypatch.setenv('GALLERY_DEBUG', 'true')

        config = AlbumConfig.from_env()

        assert config.album_path == str(tmp_path)
        assert config.port == 9000
        assert config.recursive is False
        assert config.default_thumb_size == ThumbSize(200, 150)
        assert config.pregenerate_thumbnails is False
        assert config.debug is True

    def test_validate_ok(self, tmp_path):
        assert AlbumConfig(album_path=str(tmp_path)).validate() == []

    def test_validate_missing_album(self):
        assert AlbumConfig().validate() == ["Album path is required"]

    def test_validate_errors(self, tmp_path):
        """Test every problem is reported at once."""
        config = AlbumConfig(
            album_path=str(tmp_path / 'missing'),
            theme_path=str(tmp_path / 'theme'),
            port=0,
            default_thumb_size=ThumbSize(0, 10),
            thumbnail_quality=101,
        )

        errors = config.validate()

        assert len(errors) == 5
        assert any('Album path is not a directory' in e for e in errors)
        assert any('Theme path is not a directory' in e for e in errors)
        assert any('Port out of range' in e for e in errors)
