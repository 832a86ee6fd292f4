import os
import unittest
from unittest import mock

from fleet_admin import db
from fleet_admin.config import Config, config


class TestConfig(unittest.TestCase):
    def test_local_settings_from_environment(self) -> None:
        env = {
            "DEFAULT_STORAGE_LOCATIONS": "Depósito Norte, Depósito Central,,",
            "CACHE_TTL_SECONDS": "60",
            "DATABASE_URL": "sqlite://",
        }
        with mock.patch.dict(os.environ, env):
            cfg = Config()

        self.assertEqual(
            cfg.get_app_setting("DEFAULT_STORAGE_LOCATIONS"), ["Depósito Norte", "Depósito Central"]
        )
        self.assertEqual(cfg.get_app_setting("CACHE_TTL_SECONDS"), 60)
        self.assertEqual(cfg.get_database_url(), "sqlite://")
        self.assertTrue(cfg.has_db_config())
        self.assertEqual(cfg.get_app_setting("UNKNOWN", "fallback"), "fallback")

    def test_only_consumed_settings_are_loaded(self) -> None:
        cfg = Config()

        self.assertEqual(
            set(cfg.app_config),
            {
                "CACHE_TTL_SECONDS",
                "DB_POOL_SIZE",
                "DB_POOL_RECYCLE",
                "DEFAULT_STORAGE_LOCATIONS",
                "MATERIAL_EXIT_ENTRY_TYPE",
            },
        )
        self.assertFalse(hasattr(cfg, "is_feature_enabled"))


class TestDbEngine(unittest.TestCase):
    def setUp(self) -> None:
        db.reset_db_engine()

    def tearDown(self) -> None:
        db.reset_db_engine()

    def test_engine_from_database_url_is_shared(self) -> None:
        with mock.patch.object(config, "database_url", "sqlite://"):
            engine = db.get_db_engine()
            self.assertEqual(engine.dialect.name, "sqlite")
            self.assertIs(db.get_db_engine(), engine)

    def test_missing_configuration_raises(self) -> None:
        empty = {"host": None, "port": 3306, "user": None, "password": None, "database": None}
        with mock.patch.object(config, "database_url", None), \
                mock.patch.object(config, "db_config", empty):
            with self.assertRaises(ValueError):
                db.get_db_engine()


if __name__ == "__main__":
    unittest.main()
