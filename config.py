import os
import datetime
import json
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULTS = {
    'SECRET_KEY': None,
    'JWT_SECRET_KEY': None,
    'JWT_ACCESS_TOKEN_EXPIRES': 1,  # hours
    'UPLOAD_FOLDER': './uploads',
    'ALLOWED_EXTENSIONS': ['pdf'],
    'MAX_CONTENT_LENGTH': 50 * 1024 * 1024,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///thesis_portal.db',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'BCRYPT_LOG_ROUNDS': 12,
    'DOWNLOAD_LINK_MAX_AGE': 3600,  # seconds
    'LOG_LEVEL': 'INFO',
    'DEBUG': False,
    'TESTING': False,
    'PORT': 5000,
}

INT_KEYS = {'JWT_ACCESS_TOKEN_EXPIRES', 'MAX_CONTENT_LENGTH', 'BCRYPT_LOG_ROUNDS', 'DOWNLOAD_LINK_MAX_AGE', 'PORT'}
BOOL_KEYS = {'SQLALCHEMY_TRACK_MODIFICATIONS', 'DEBUG', 'TESTING'}


def read_config_file(path=None):
    """Load the JSON config, falling back to democonfig.json like a fresh checkout would."""
    candidates = [path] if path else [
        'config.json',
        os.path.join(BASE_DIR, 'config.json'),
        'democonfig.json',
        os.path.join(BASE_DIR, 'democonfig.json'),
    ]
    for candidate in candidates:
        try:
            with open(candidate) as fh:
                return json.load(fh)
        except FileNotFoundError:
            continue
    return {}


def _from_env(key, value):
    if key in INT_KEYS:
        return int(value)
    if key in BOOL_KEYS:
        return value.lower() in ('1', 'true', 'yes', 'on')
    if key == 'ALLOWED_EXTENSIONS':
        return [ext.strip() for ext in value.split(',') if ext.strip()]
    return value


class Config:
    """Settings for one process, read once at startup and frozen afterwards.

    Values are layered: JSON file, then environment, then keyword overrides.
    A missing JWT signing key is fatal.
    """

    # fixed: the frontend sends the raw token in a custom header
    JWT_TOKEN_LOCATION = ['headers']
    JWT_HEADER_NAME = 'x-auth-token'
    JWT_HEADER_TYPE = ''

    def __init__(self, path=None, **overrides):
        values = dict(DEFAULTS)
        values.update(read_config_file(path))
        for key in DEFAULTS:
            if os.getenv(key) is not None:
                values[key] = _from_env(key, os.getenv(key))
        values.update(overrides)

        if not values.get('JWT_SECRET_KEY'):
            raise RuntimeError('JWT_SECRET_KEY is not configured; refusing to start')
        if not values.get('SECRET_KEY'):
            values['SECRET_KEY'] = values['JWT_SECRET_KEY']

        expires = values['JWT_ACCESS_TOKEN_EXPIRES']
        if not isinstance(expires, datetime.timedelta):
            values['JWT_ACCESS_TOKEN_EXPIRES'] = datetime.timedelta(hours=int(expires))
        values['ALLOWED_EXTENSIONS'] = frozenset(ext.lower() for ext in values['ALLOWED_EXTENSIONS'])
        values['UPLOAD_FOLDER'] = os.path.abspath(values['UPLOAD_FOLDER'])

        for key, value in values.items():
            object.__setattr__(self, key, value)

    def __setattr__(self, key, value):
        raise AttributeError('Config is read-only')

    def __repr__(self):
        return f'<Config db={self.SQLALCHEMY_DATABASE_URI!r} uploads={self.UPLOAD_FOLDER!r}>'
