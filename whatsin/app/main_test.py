"""Unit tests for the WhatsIn FastAPI application."""

import os
import tempfile
import unittest
from unittest import mock

import fastapi.staticfiles
import fastapi.testclient
import sqlalchemy
import sqlalchemy.exc
import sqlalchemy.pool
import sqlmodel

from whatsin.app import database, main


def make_in_memory_engine() -> sqlalchemy.Engine:
    """Create an in-memory SQLite engine for testing."""
    engine = sqlmodel.create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=sqlalchemy.pool.StaticPool,
    )
    sqlmodel.SQLModel.metadata.create_all(engine)
    return engine


class TestApp(unittest.TestCase):
    """Tests for the application wiring."""

    def setUp(self) -> None:
        """Point the database at an in-memory engine."""
        patcher = mock.patch.object(database, 'engine', make_in_memory_engine())
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = fastapi.testclient.TestClient(main.app)

    def test_title(self) -> None:
        self.assertEqual(main.app.title, 'WhatsIn')

    def test_health_endpoint(self) -> None:
        """Test health check endpoint."""
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'healthy'})

    def test_health_endpoint_head(self) -> None:
        """Test health check endpoint with HEAD method."""
        response = self.client.head('/health')
        self.assertEqual(response.status_code, 200)

    def test_health_reports_database_failure(self) -> None:
        broken = mock.MagicMock()
        broken.connect.side_effect = sqlalchemy.exc.OperationalError(
            'SELECT 1', {}, Exception('unreachable')
        )
        with mock.patch.object(database, 'engine', broken):
            with self.assertLogs('common.health', level='ERROR'):
                response = self.client.get('/health')
        self.assertEqual(response.status_code, 503)

    def test_routes_registered(self) -> None:
        paths = {getattr(route, 'path', None) for route in main.app.routes}
        for path in (
            '/Places/Nearby',
            '/Product/UploadImage',
            '/Product/Add',
            '/Product/FindProducts',
            '/health',
        ):
            self.assertIn(path, paths)

    def test_uploads_mounted(self) -> None:
        mounts = [
            route
            for route in main.app.routes
            if isinstance(getattr(route, 'app', None), fastapi.staticfiles.StaticFiles)
        ]
        self.assertEqual([m.path for m in mounts], ['/ImageUploads'])  # type: ignore[attr-defined]

    def test_lifespan_creates_tables(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, 'nested', 'whatsin.db')
            url = f'sqlite:///{db_path}'
            engine = sqlmodel.create_engine(
                url, connect_args={'check_same_thread': False}
            )
            with (
                mock.patch.object(database, 'DATABASE_URL', url),
                mock.patch.object(database, 'engine', engine),
                mock.patch('common.settings.UPLOADS_DIR', os.path.join(tmpdir, 'up')),
            ):
                with fastapi.testclient.TestClient(main.app) as client:
                    self.assertEqual(client.get('/health').status_code, 200)
            self.assertTrue(os.path.exists(db_path))
            tables = set(sqlalchemy.inspect(engine).get_table_names())
            engine.dispose()
        self.assertTrue({'product', 'place', 'post'} <= tables)


if __name__ == '__main__':
    unittest.main()
