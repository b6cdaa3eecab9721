"""
DATABASES['default'] from the environment.

DATABASE_URL wins, then DB_HOST with its DB_* companions, then a local
SQLite file. Inside Lambda connections are not reused (RDS Proxy pools them).
"""
import os
from pathlib import Path
from urllib.parse import unquote, urlsplit

POSTGRES_ENGINE = 'django.db.backends.postgresql'


def get_database_config(base_dir: Path) -> dict:
    url = os.getenv('DATABASE_URL', '')
    if url.startswith(('postgres://', 'postgresql://')):
        config = _from_url(url)
    elif os.getenv('DB_HOST'):
        config = _from_env()
    else:
        return {'ENGINE': 'django.db.backends.sqlite3', 'NAME': base_dir / 'db.sqlite3'}
    return _with_connection_options(config)


def _from_url(url: str) -> dict:
    parts = urlsplit(url)
    name = parts.path.lstrip('/')
    if not parts.hostname or not name:
        raise ValueError("DATABASE_URL needs a host and a database name")
    return {
        'ENGINE': POSTGRES_ENGINE,
        'NAME': name,
        'USER': unquote(parts.username or ''),
        'PASSWORD': unquote(parts.password or ''),
        'HOST': parts.hostname,
        'PORT': str(parts.port or 5432),
    }


def _from_env() -> dict:
    config = {
        'ENGINE': POSTGRES_ENGINE,
        'NAME': os.getenv('DB_NAME', 'ccms'),
        'USER': os.getenv('DB_USER', 'postgres'),
        'PASSWORD': os.getenv('DB_PASSWORD', ''),
        'HOST': os.environ['DB_HOST'],
        'PORT': os.getenv('DB_PORT', '5432'),
    }
    if os.getenv('DB_SSLMODE'):
        config['OPTIONS'] = {'sslmode': os.getenv('DB_SSLMODE')}
    return config


def _with_connection_options(config: dict) -> dict:
    options = config.setdefault('OPTIONS', {})
    if os.getenv('AWS_LAMBDA_FUNCTION_NAME'):
        config['CONN_MAX_AGE'] = 0
        options['connect_timeout'] = 5
        options['options'] = '-c statement_timeout=30000'
    else:
        config['CONN_MAX_AGE'] = int(os.getenv('DB_CONN_MAX_AGE', '60'))
    return config
