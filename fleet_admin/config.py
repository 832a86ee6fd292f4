# fleet_admin/config.py

import os
import logging
from dotenv import load_dotenv
from typing import Dict, Any, List, Optional

# Initialize logger
logger = logging.getLogger(__name__)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and "DB_CONFIG" in st.secrets
    except Exception:
        return False


def _split_list(raw: Optional[str]) -> List[str]:
    """Split a comma separated setting into a clean list"""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    """Centralized configuration management for the fleet admin app"""

    def __init__(self):
        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        # Common configuration
        self._load_app_config()
        self._log_config_status()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        # Database configuration
        self.db_config = dict(st.secrets["DB_CONFIG"])
        self.db_config.setdefault("port", 3306)
        self.database_url = st.secrets.get("DATABASE_URL")

        logger.info("☁️  Running in STREAMLIT CLOUD")

    def _load_local_config(self):
        """Load configuration from local environment"""
        # Load .env file
        load_dotenv()

        # Database configuration - No hardcoding!
        self.db_config = {
            "host": os.getenv("DB_HOST"),
            "port": int(os.getenv("DB_PORT", "3306")),
            "user": os.getenv("DB_USER"),
            "password": os.getenv("DB_PASSWORD"),
            "database": os.getenv("DB_NAME", os.getenv("DB_DATABASE", "fleet_admin"))
        }

        # Full URL wins over the discrete settings (tests, local SQLite)
        self.database_url = os.getenv("DATABASE_URL")

        logger.info("💻 Running in LOCAL environment")

    def _load_app_config(self):
        """Load application-specific configuration"""
        self.app_config = {
            # Performance
            "CACHE_TTL_SECONDS": int(os.getenv("CACHE_TTL_SECONDS", "300")),  # 5 minutes
            "DB_POOL_SIZE": int(os.getenv("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(os.getenv("DB_POOL_RECYCLE", "3600")),

            # Storage allocation
            "DEFAULT_STORAGE_LOCATIONS": _split_list(os.getenv("DEFAULT_STORAGE_LOCATIONS")),
            "MATERIAL_EXIT_ENTRY_TYPE": os.getenv("MATERIAL_EXIT_ENTRY_TYPE", "orden"),
        }

    def _log_config_status(self):
        """Log configuration status for debugging"""

        issues = []  # Track issues for summary

        logger.info("─" * 55)
        logger.info("📊 DATABASE CONFIGURATION")

        if self.database_url:
            # Never log credentials embedded in the URL
            logger.info(f"   ✅ DATABASE_URL: {self.database_url.split('://')[0]}://***")
        else:
            db_host = self.db_config.get('host')
            db_user = self.db_config.get('user')
            db_pass = self.db_config.get('password')
            db_name = self.db_config.get('database')
            db_port = self.db_config.get('port', 3306)

            if all([db_host, db_user, db_pass, db_name]):
                logger.info(f"   ✅ Host: {db_host}:{db_port}")
                logger.info(f"   ✅ Database: {db_name}")
                logger.info(f"   ✅ User: {db_user}")
                logger.info(f"   ✅ Password: {'*' * 8} (configured)")
            else:
                missing = []
                if not db_host: missing.append('host')
                if not db_user: missing.append('user')
                if not db_pass: missing.append('password')
                if not db_name: missing.append('database')
                logger.error(f"   ❌ Missing: {', '.join(missing)}")
                issues.append(f"Database: missing {', '.join(missing)}")

        logger.info("─" * 55)
        logger.info("📦 STORAGE ALLOCATION")

        locations = self.app_config.get("DEFAULT_STORAGE_LOCATIONS", [])
        if locations:
            logger.info(f"   ✅ Default locations: {', '.join(locations)}")
        else:
            logger.info(f"   ℹ️  Default locations: Not configured (optional)")

        logger.info("─" * 55)
        if issues:
            logger.warning(f"⚠️  CONFIGURATION ISSUES FOUND ({len(issues)}):")
            for issue in issues:
                logger.warning(f"   • {issue}")
            logger.info("─" * 55)
        else:
            logger.info("✅ ALL REQUIRED CONFIGURATIONS LOADED SUCCESSFULLY")
            logger.info("─" * 55)

    def has_db_config(self) -> bool:
        """Check whether an engine can be built from this configuration"""
        if self.database_url:
            return True
        return all([
            self.db_config.get('host'),
            self.db_config.get('user'),
            self.db_config.get('password'),
            self.db_config.get('database'),
        ])

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration"""
        return self.db_config.copy()

    def get_database_url(self) -> Optional[str]:
        """Get explicit database URL, if any"""
        return self.database_url

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting"""
        return self.app_config.get(key, default)


# Create singleton instance
config = Config()

__all__ = [
    'config',
    'Config',
]
