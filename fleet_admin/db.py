# fleet_admin/db.py

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, URL

from .config import config

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def _build_url():
    """Build the connection URL from configuration"""
    database_url = config.get_database_url()
    if database_url:
        return database_url

    db = config.get_db_config()
    return URL.create(
        "mysql+pymysql",
        username=db["user"],
        password=db["password"],
        host=db["host"],
        port=int(db.get("port", 3306)),
        database=db["database"],
        query={"charset": "utf8mb4"},
    )


def get_db_engine() -> Engine:
    """Get the shared SQLAlchemy engine, creating it on first use"""
    global _engine

    if _engine is not None:
        return _engine

    if not config.has_db_config():
        raise ValueError("Missing required database configuration. Please check .env file.")

    url = _build_url()
    kwargs = {"pool_pre_ping": True}
    if not str(url).startswith("sqlite"):
        kwargs["pool_size"] = config.get_app_setting("DB_POOL_SIZE", 5)
        kwargs["pool_recycle"] = config.get_app_setting("DB_POOL_RECYCLE", 3600)

    _engine = create_engine(url, **kwargs)
    logger.info(f"Database engine created ({_engine.dialect.name})")
    return _engine


def reset_db_engine():
    """Dispose the shared engine; the next call to get_db_engine() rebuilds it"""
    global _engine

    if _engine is not None:
        _engine.dispose()
        logger.debug("Database engine disposed")
    _engine = None
