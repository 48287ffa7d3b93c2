"""Unit tests for common/settings.py."""

import importlib
import os
import unittest
from unittest import mock

import common.settings

_KEYS = (
    'DATA_DIR',
    'DATABASE_URL',
    'UPLOADS_DIR',
    'NEARBY_RADIUS_KM',
    'THUMBNAIL_SIZE',
    'CORS_ORIGINS',
    'LOG_LEVEL',
)


class TestSettings(unittest.TestCase):
    """Tests for shared application settings."""

    def _reload_with(self, **env: str) -> None:
        clean = {k: v for k, v in os.environ.items() if k not in _KEYS}
        clean.update(env)
        with mock.patch.dict(os.environ, clean, clear=True):
            importlib.reload(common.settings)

    def tearDown(self) -> None:
        """Reload settings from the real environment."""
        importlib.reload(common.settings)

    def test_defaults(self) -> None:
        """Defaults derive every path from the data directory."""
        self._reload_with()
        self.assertEqual(common.settings.DATA_DIR, 'data')
        self.assertEqual(
            common.settings.DATABASE_URL,
            'sqlite:///' + os.path.join('data', 'whatsin.db'),
        )
        self.assertEqual(
            common.settings.UPLOADS_DIR, os.path.join('data', 'ImageUploads')
        )
        self.assertEqual(common.settings.NEARBY_RADIUS_KM, 5.0)
        self.assertEqual(common.settings.THUMBNAIL_SIZE, 200)
        self.assertEqual(common.settings.CORS_ORIGINS, ['*'])
        self.assertEqual(common.settings.LOG_LEVEL, 'INFO')

    def test_data_dir_moves_database_and_uploads(self) -> None:
        """DATA_DIR is the root for the database file and uploads."""
        self._reload_with(DATA_DIR='/srv/whatsin')
        self.assertEqual(
            common.settings.DATABASE_URL, 'sqlite:////srv/whatsin/whatsin.db'
        )
        self.assertEqual(common.settings.UPLOADS_DIR, '/srv/whatsin/ImageUploads')

    def test_numeric_settings_parsed(self) -> None:
        """Radius and thumbnail size are parsed as numbers."""
        self._reload_with(NEARBY_RADIUS_KM='12.5', THUMBNAIL_SIZE='64')
        self.assertEqual(common.settings.NEARBY_RADIUS_KM, 12.5)
        self.assertEqual(common.settings.THUMBNAIL_SIZE, 64)

    def test_cors_origins_split(self) -> None:
        """CORS_ORIGINS is a comma-separated list."""
        self._reload_with(CORS_ORIGINS='https://a.example, https://b.example,')
        self.assertEqual(
            common.settings.CORS_ORIGINS, ['https://a.example', 'https://b.example']
        )

    def test_log_level_uppercased(self) -> None:
        """LOG_LEVEL is normalised to upper case."""
        self._reload_with(LOG_LEVEL='debug')
        self.assertEqual(common.settings.LOG_LEVEL, 'DEBUG')


if __name__ == '__main__':
    unittest.main()
