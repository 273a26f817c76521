import os
import unittest
from unittest.mock import patch

from feedboard import dependencies
from feedboard.config import Settings
from feedboard.storage import InMemoryKeyValueStorage, SqlKeyValueStorage


class DependencyWiringTests(unittest.TestCase):
    def setUp(self):
        dependencies.reset_dependencies()

    def tearDown(self):
        dependencies.reset_dependencies()

    def test_memory_toggle_wins(self):
        settings = Settings(use_in_memory_backends=True, storage_backend="sql")
        storage = dependencies.build_key_value_storage(settings)
        self.assertIsInstance(storage, InMemoryKeyValueStorage)

    def test_sql_backend(self):
        settings = Settings(
            storage_backend="sql", database_url="sqlite+pysqlite:///:memory:"
        )
        storage = dependencies.build_key_value_storage(settings)
        self.assertIsInstance(storage, SqlKeyValueStorage)

    def test_unconfigured_backend_falls_back_to_memory(self):
        settings = Settings(storage_backend="redis", redis_url=None)
        with self.assertLogs("feedboard.dependencies", level="WARNING"):
            storage = dependencies.build_key_value_storage(settings)
        self.assertIsInstance(storage, InMemoryKeyValueStorage)

    @patch.dict(os.environ, {"FEEDBOARD_LOG_LEVEL": "info"})
    def test_log_level_is_normalized(self):
        settings = Settings()
        self.assertEqual(settings.log_level, "INFO")
        self.assertEqual(Settings(log_level=" debug ").log_level, "DEBUG")

    @patch("feedboard.dependencies.get_settings")
    def test_get_store_is_a_loaded_singleton(self, mock_settings):
        mock_settings.return_value = Settings(storage_backend="memory")
        store = dependencies.get_store()
        self.assertFalse(store.is_loading)
        self.assertIs(dependencies.get_store(), store)
        self.assertIsInstance(dependencies.get_key_value_storage(), InMemoryKeyValueStorage)


if __name__ == "__main__":
    unittest.main()
