"""Database URL helpers for Alembic migrations.

Kept apart from env.py so they can be tested without an alembic context.
"""

from __future__ import annotations

import os
from urllib.parse import quote_plus, urlparse, urlunparse

from psycopg2.extensions import parse_dsn

_DRIVER_SCHEME = "postgresql+psycopg2"


def _libpq_dsn_to_url(dsn: str) -> str:
    """Convert a libpq key=value DSN to a SQLAlchemy URL.

    A host starting with "/" is a unix socket directory and goes in the
    query string.
    """
    params = parse_dsn(dsn)
    if not params.get("password") and os.environ.get("DB_PASSWORD"):
        params["password"] = os.environ["DB_PASSWORD"]

    user = quote_plus(params.get("user", ""))
    password = quote_plus(params.get("password", ""))
    dbname = quote_plus(params.get("dbname", ""))
    host = params.get("host", "localhost")
    port = params.get("port", "5432")

    if host.startswith("/"):
        return f"{_DRIVER_SCHEME}://{user}:{password}@/{dbname}?host={quote_plus(host)}"
    return f"{_DRIVER_SCHEME}://{user}:{password}@{host}:{port}/{dbname}"


def _url_with_driver(url: str) -> str:
    scheme, _, rest = url.partition("://")
    if scheme in ("postgres", "postgresql"):
        url = f"{_DRIVER_SCHEME}://{rest}"

    db_password = os.environ.get("DB_PASSWORD", "")
    parsed = urlparse(url)
    if db_password and not parsed.password:
        netloc = f"{quote_plus(parsed.username or '')}:{quote_plus(db_password)}@{parsed.hostname or ''}"
        if parsed.port:
            netloc += f":{parsed.port}"
        url = urlunparse(parsed._replace(netloc=netloc))
    return url


def get_database_url() -> str:
    """SQLAlchemy URL for DATABASE_URL (URL or key=value form).

    Raises:
        RuntimeError: If DATABASE_URL is not set.
    """
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is required to run migrations")
    if "://" in url:
        return _url_with_driver(url)
    return _libpq_dsn_to_url(url)
