"""GPS extraction and storage for uploaded sighting photos."""

import io
import logging
import os
import threading
import time
from collections.abc import Callable
from typing import Any, BinaryIO

import exifread
import pillow_heif  # pyright: ignore[reportMissingTypeStubs]
from PIL import Image

import common.settings

from .. import errors, models

logger = logging.getLogger(__name__)

# Register HEIF opener for PIL
pillow_heif.register_heif_opener()  # type: ignore

HEIF_EXTENSIONS = ('.heic', '.heif')

# Pillow raises any of these for truncated, corrupt or unknown formats
_DECODE_ERRORS = (OSError, SyntaxError, ValueError)
# Raised by Pillow when a format has no writer for an image mode
_ENCODE_ERRORS = (OSError, KeyError, ValueError)


def stored_extension(original_file_name: str | None) -> str:
    """Extension an upload is stored under; HEIC/HEIF are converted to JPEG."""
    extension = os.path.splitext(original_file_name or '')[1].lower()
    if extension in HEIF_EXTENSIONS:
        return '.jpg'
    return extension


class AssetNamer:
    """Generates unique, strictly increasing names for stored images.

    Ids are 100ns clock ticks. Two calls landing on the same tick, or a clock
    stepping backwards, still produce distinct increasing ids.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns):
        """Initialize with a nanosecond clock."""
        self._clock = clock
        self._lock = threading.Lock()
        self._last = 0

    def next_id(self) -> int:
        """Return the next asset id."""
        with self._lock:
            ticks = self._clock() // 100
            if ticks <= self._last:
                ticks = self._last + 1
            self._last = ticks
            return ticks

    def name_for(self, original_file_name: str | None) -> str:
        """Return a fresh file name carrying the original's extension."""
        return f'{self.next_id()}{stored_extension(original_file_name)}'


_default_namer = AssetNamer()


class GeoMetadataExtractor:
    """Reads GPS coordinates from image metadata and names the stored asset.

    Coordinates are returned exactly as decoded; range checks are the caller's
    job before anything is persisted.
    """

    def __init__(self, namer: AssetNamer | None = None):
        """Initialize the extractor, sharing the process-wide namer by default."""
        self.namer = namer or _default_namer

    def extract(
        self, file: BinaryIO, original_file_name: str | None
    ) -> models.GeoExtractionResult:
        """Decode GPS coordinates from an uploaded image.

        Raises:
            ImageParseError: the bytes are not a decodable image.
            NoGpsDataError: the image has no GPS latitude/longitude.
        """
        content = file.read()
        self._verify_image(content)

        coordinates = self.read_gps(io.BytesIO(content))
        if coordinates is None:
            raise errors.NoGpsDataError('Image has no GPS metadata')
        latitude, longitude = coordinates

        return models.GeoExtractionResult(
            file_name=self.namer.name_for(original_file_name),
            latitude=latitude,
            longitude=longitude,
        )

    def _verify_image(self, content: bytes) -> None:
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
        except _DECODE_ERRORS as e:
            raise errors.ImageParseError(str(e) or type(e).__name__) from e

    def read_gps(self, file: BinaryIO) -> tuple[float, float] | None:
        """Return (latitude, longitude) in decimal degrees, or None if absent."""
        try:
            tags = exifread.process_file(file, details=False)
        except Exception as e:
            raise errors.ImageParseError(f'Unreadable EXIF data: {e}') from e

        if not any(key.startswith('GPS ') for key in tags):
            return None

        gps_latitude = tags.get('GPS GPSLatitude')
        gps_latitude_ref = tags.get('GPS GPSLatitudeRef')
        gps_longitude = tags.get('GPS GPSLongitude')
        gps_longitude_ref = tags.get('GPS GPSLongitudeRef')
        if gps_latitude is None or gps_longitude is None:
            return None

        lat = self._convert_to_degrees(gps_latitude)
        if str(gps_latitude_ref).strip().upper() == 'S':
            lat = -lat

        lon = self._convert_to_degrees(gps_longitude)
        if str(gps_longitude_ref).strip().upper() == 'W':
            lon = -lon

        return lat, lon

    def _convert_to_degrees(self, value: Any) -> float:
        """Convert GPS coordinates from DMS to decimal degrees."""
        parts: list[float] = []
        for ratio in value.values[:3]:
            if not ratio.den:
                raise errors.ImageParseError('GPS coordinate has a zero denominator')
            parts.append(float(ratio.num) / float(ratio.den))
        if not parts:
            raise errors.ImageParseError('GPS coordinate has no values')
        parts.extend([0.0] * (3 - len(parts)))
        degrees, minutes, seconds = parts

        return degrees + (minutes / 60.0) + (seconds / 3600.0)


class ImageStore:
    """Stores uploaded images as fixed-size thumbnails under the uploads directory."""

    def __init__(self, upload_dir: str | None = None, size: int | None = None):
        """Initialize the store, creating the upload directory if needed."""
        self.upload_dir = upload_dir or common.settings.UPLOADS_DIR
        self.size = size or common.settings.THUMBNAIL_SIZE
        os.makedirs(self.upload_dir, exist_ok=True)

    def path_for(self, file_name: str) -> str:
        """Absolute location of a stored image."""
        return os.path.join(self.upload_dir, os.path.basename(file_name))

    def save(self, content: bytes, file_name: str) -> str:
        """Resize and write an image; returns the path written."""
        file_path = self.path_for(file_name)
        extension = os.path.splitext(file_name)[1].lower()

        try:
            with Image.open(io.BytesIO(content)) as img:
                image_format = Image.registered_extensions().get(
                    extension, img.format or 'JPEG'
                )
                thumbnail = img.resize((self.size, self.size))
        except _DECODE_ERRORS as e:
            raise errors.ImageParseError(str(e) or type(e).__name__) from e

        # Convert to RGB if necessary (JPEG has no alpha or palette modes)
        if image_format == 'JPEG' and thumbnail.mode not in ('RGB', 'L'):
            thumbnail = thumbnail.convert('RGB')

        try:
            data = _encode(thumbnail, image_format)
        except _ENCODE_ERRORS:
            fallback = 'RGBA' if 'A' in thumbnail.getbands() else 'RGB'
            try:
                data = _encode(thumbnail.convert(fallback), image_format)
            except _ENCODE_ERRORS as e:
                raise errors.ImageParseError(
                    f'Cannot store {thumbnail.mode} image as {image_format}: {e}'
                ) from e

        with open(file_path, 'wb') as f:
            f.write(data)
        logger.info('Stored image %s (%s)', file_name, image_format)
        return file_path


def _encode(img: Image.Image, image_format: str) -> bytes:
    output = io.BytesIO()
    img.save(output, format=image_format)
    return output.getvalue()
