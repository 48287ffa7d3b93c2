"""Shared application settings read from environment variables."""

import os

DATA_DIR: str = os.environ.get('DATA_DIR', 'data')
DATABASE_URL: str = os.environ.get(
    'DATABASE_URL', f'sqlite:///{os.path.join(DATA_DIR, "whatsin.db")}'
)

UPLOADS_DIR: str = os.environ.get('UPLOADS_DIR', os.path.join(DATA_DIR, 'ImageUploads'))
UPLOADS_URL_PATH: str = '/ImageUploads'

NEARBY_RADIUS_KM: float = float(os.environ.get('NEARBY_RADIUS_KM', '5.0'))
THUMBNAIL_SIZE: int = int(os.environ.get('THUMBNAIL_SIZE', '200'))

CORS_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.environ.get('CORS_ORIGINS', '*').split(',')
    if origin.strip()
]

LOG_LEVEL: str = os.environ.get('LOG_LEVEL', 'INFO').upper()
