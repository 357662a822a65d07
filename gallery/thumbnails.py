"""
Thumbnails - Resizes pictures and caches the results next to the originals.
"""

import io
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import AlbumIOError, ThumbnailDecodeError
from .models import ImageItem


class ThumbnailGenerator:
    """
    Generates thumbnails from original images using Pillow.

    The thumbnail is encoded in the same family as the decoded original
    (JPEG, PNG or GIF); anything else is written as JPEG.
    """

    OUTPUT_FORMATS = {
        'JPEG': ('JPEG', 'image/jpeg'),
        'MPO': ('JPEG', 'image/jpeg'),
        'PNG': ('PNG', 'image/png'),
        'GIF': ('GIF', 'image/gif'),
    }
    FALLBACK_FORMAT = ('JPEG', 'image/jpeg')

    def __init__(self, quality: int = 85, logger: Optional[logging.Logger] = None):
        """
        Initialize thumbnail generator.

        Args:
            quality: JPEG quality for output (default: 85)
            logger: Optional logger instance
        """
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, source_path: str, width: int, height: int) -> Tuple[bytes, str]:
        """
        Generate a thumbnail fitting within width x height.

        Args:
            source_path: Disk path of the original image
            width: Maximum thumbnail width
            height: Maximum thumbnail height

        Returns:
            Tuple of (thumbnail_bytes, content_type)

        Raises:
            AlbumIOError: If the original cannot be opened
            ThumbnailDecodeError: If the original is not a readable image
        """
        try:
            source = open(source_path, 'rb')
        except OSError as e:
            raise AlbumIOError(source_path, "opening image file to generate thumbnail", e)

        with source:
            try:
                img = Image.open(source)
                img.load()
            except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
                self.logger.warning(f"Cannot decode {source_path}: {e}")
                raise ThumbnailDecodeError(source_path, e)

            output_format, content_type = self.OUTPUT_FORMATS.get(img.format, self.FALLBACK_FORMAT)
            img.thumbnail((width, height), Image.Resampling.BILINEAR)

            output = io.BytesIO()
            if output_format == 'JPEG':
                img = self._convert_color_mode(img)
                img.save(output, format='JPEG', quality=self.quality, optimize=True)
            elif output_format == 'PNG':
                img.save(output, format='PNG', optimize=True)
            else:
                img.save(output, format='GIF')

        return output.getvalue(), content_type

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Flatten transparency onto white; JPEG only stores RGB."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img


class ThumbnailCache:
    """
    Hands out thumbnail files, generating each one the first time it is asked for.

    Thumbnails live beside their original as <file-name>_<width>_x_<height>.
    Once written a thumbnail is never regenerated, even if the original
    changes later. Concurrent requests for the same missing thumbnail wait
    for a single generation instead of racing on the target file.
    """

    def __init__(
        self,
        generator: Optional[ThumbnailGenerator] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.generator = generator or ThumbnailGenerator(logger=self.logger)
        self.generated = 0
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        """Hold the generation lock of one thumbnail."""
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                # [lock, number of threads holding or waiting for it]
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    @staticmethod
    def _exists(path: str) -> bool:
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise AlbumIOError(path, "checking thumbnail file existence", e)
        return True

    def ensure(self, image: ImageItem, width: int, height: int) -> str:
        """
        Return the disk path of a picture's thumbnail, creating it if missing.

        Args:
            image: Picture to thumbnail
            width: Bounding box width
            height: Bounding box height

        Returns:
            Disk path of the thumbnail file

        Raises:
            AlbumIOError: On filesystem failures
            ThumbnailDecodeError: If the picture cannot be decoded
        """
        target = image.file_system_thumb(width, height)
        if self._exists(target):
            self.logger.debug(f"Serving previously scaled thumbnail {target}")
            return target

        with self._locked(target):
            # Another request may have produced it while we waited.
            if self._exists(target):
                return target

            thumb_data, _ = self.generator.generate(image.path, width, height)
            self._write(target, thumb_data)
            self.generated += 1
            self.logger.info(f"Created thumb {target} ({len(thumb_data)} bytes)")

        return target

    def _write(self, target: str, data: bytes) -> None:
        """Write a thumbnail through a temp file so readers never see a partial one."""
        folder, name = os.path.split(target)
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                'wb', dir=folder or '.', prefix=f".{name}-", suffix='.tmp', delete=False
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(data)
            shutil.move(tmp_path, target)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise AlbumIOError(target, "writing thumbnail file", e)

    def content_type(self, thumb_path: str) -> str:
        """
        Content type of a thumbnail file, read from its encoded format.

        Thumbnails carry no extension, and their format follows the decoded
        original rather than the original's file name.

        Raises:
            AlbumIOError: If the thumbnail cannot be read back
        """
        try:
            with Image.open(thumb_path) as img:
                image_format = img.format
        except (UnidentifiedImageError, OSError) as e:
            raise AlbumIOError(thumb_path, "reading thumbnail format of", e)
        _, content_type = ThumbnailGenerator.OUTPUT_FORMATS.get(
            image_format, ThumbnailGenerator.FALLBACK_FORMAT
        )
        return content_type
