"""Tests for the metadata sidecar codec."""

import json
import os

import pytest

from gallery.errors import AlbumIOError, MetadataFormatError
from gallery.metadata import (
    load_metadata,
    read_metadata,
    save_metadata,
    sidecar_exists,
    write_metadata,
)
from gallery.models import Group, ImageItem, ThumbSize


class TestCodec:
    """Tests for write_metadata and read_metadata."""

    def test_round_trip(self, sample_tree):
        """Test every persisted field survives serialization."""
        sample_tree.description = 'Summer'
        sample_tree.get_image('b.png').visible = False
        sample_tree.get_image('b.png').existing = False

        restored = read_metadata(write_metadata(sample_tree))

        assert restored.to_dict() == sample_tree.to_dict()
        assert restored.order == ['a.jpg', 'b.png']
        assert restored.sub_group_order == ['trip', 'zoo']
        assert restored.allowed_thumb_sizes == [ThumbSize(320, 213)]
        assert restored.get_image('a.jpg').parent is restored

    def test_write_is_utf8_json(self):
        """Test non ASCII text is stored as UTF-8."""
        group = Group(path='/album', title='Été')

        data = write_metadata(group)

        assert 'Été'.encode('utf-8') in data
        assert json.loads(data.decode('utf-8'))['title'] == 'Été'

    def test_empty_input(self):
        """Test an empty sidecar is a valid empty folder."""
        for data in [b'', b'   \n', '']:
            group = read_metadata(data)
            assert group.pictures == {}
            assert group.order == []
            assert group.allowed_thumb_sizes is None

    def test_fills_given_group(self):
        group = Group(path='/album')

        result = read_metadata(b'{"title": "Trip"}', group)

        assert result is group
        assert group.title == 'Trip'

    @pytest.mark.parametrize('data', [
        b'{not json',
        b'[1, 2, 3]',
        b'"a string"',
        b'\xff\xfe\x00',
        b'{"pictures": {"a.jpg": "oops"}}',
        b'{"allowed-thumb-sizes": [{"width": 10}]}',
    ])
    def test_malformed(self, data):
        """Test malformed sidecars raise MetadataFormatError."""
        with pytest.raises(MetadataFormatError):
            read_metadata(data, source='/album/metadata.json')


class TestSidecarFiles:
    """Tests for sidecar file access."""

    def test_sidecar_exists(self, tmp_path):
        folder = str(tmp_path)
        assert not sidecar_exists(folder)

        save_metadata(Group(path=folder))

        assert sidecar_exists(folder)

    def test_sidecar_not_a_file(self, tmp_path):
        """Test a directory named like the sidecar is an error."""
        (tmp_path / 'metadata.json').mkdir()

        with pytest.raises(AlbumIOError) as exc_info:
            sidecar_exists(str(tmp_path))

        assert exc_info.value.path.endswith('metadata.json')

    def test_save_and_load(self, tmp_path):
        """Test a saved folder loads back with the same metadata."""
        folder = str(tmp_path)
        group = Group(path=folder, title='Trip')
        group.add_picture(ImageItem(path=os.path.join(folder, 'a.jpg'), file_name='a.jpg'))

        save_metadata(group)
        loaded = load_metadata(Group(path=folder))

        assert loaded.to_dict() == group.to_dict()

    def test_save_leaves_no_temp_files(self, tmp_path):
        save_metadata(Group(path=str(tmp_path)))
        save_metadata(Group(path=str(tmp_path), title='Again'))

        assert os.listdir(str(tmp_path)) == ['metadata.json']

    def test_save_into_missing_folder(self, tmp_path):
        """Test write failures are wrapped with the sidecar path."""
        group = Group(path=str(tmp_path / 'gone'))

        with pytest.raises(AlbumIOError) as exc_info:
            save_metadata(group)

        assert exc_info.value.path == group.sidecar_path

    def test_load_malformed_names_file(self, tmp_path):
        (tmp_path / 'metadata.json').write_text('{broken')

        with pytest.raises(MetadataFormatError) as exc_info:
            load_metadata(Group(path=str(tmp_path)))

        assert exc_info.value.path == str(tmp_path / 'metadata.json')
