import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError
from redis import exceptions as redis_exceptions

from knowledge_base.config import Settings
from knowledge_base.dependencies import build_context, build_store
from knowledge_base.errors import StoreError
from knowledge_base.storage import (
    InMemoryBlobStore,
    RedisBlobStore,
    S3BlobStore,
    SqlBlobStore,
)


class InMemoryBlobStoreTests(unittest.TestCase):
    def test_get_put_reset(self):
        store = InMemoryBlobStore()
        self.assertIsNone(store.get("articles"))
        store.put("articles", "[]")
        self.assertEqual(store.get("articles"), "[]")
        store.reset()
        self.assertIsNone(store.get("articles"))


class SqlBlobStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store.
    """

    @classmethod
    def setUpClass(cls):
        cls.store = SqlBlobStore("sqlite+pysqlite:///:memory:")

    def test_missing_key_is_absent(self):
        self.assertIsNone(self.store.get("never-written"))

    def test_put_then_overwrite(self):
        self.store.put("categories", '{"c1": {"id": "c1"}}')
        self.assertEqual(self.store.get("categories"), '{"c1": {"id": "c1"}}')
        self.store.put("categories", "{}")
        self.assertEqual(self.store.get("categories"), "{}")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlBlobStore("")

    def test_first_write_from_two_clients_last_wins(self):
        with tempfile.TemporaryDirectory() as tmp:
            url = "sqlite+pysqlite:///" + os.path.join(tmp, "kb.db")
            first = SqlBlobStore(url)
            second = SqlBlobStore(url)
            first.put("articles", "[1]")
            # A put must not depend on reading the row first.
            with patch("knowledge_base.storage.Session.get", side_effect=AssertionError):
                second.put("articles", "[2]")
            self.assertEqual(first.get("articles"), "[2]")
            first.engine.dispose()
            second.engine.dispose()

    def test_generic_dialect_falls_back_to_merge(self):
        store = SqlBlobStore("sqlite+pysqlite:///:memory:")
        with patch.object(store, "_upsert", return_value=None):
            store.put("tags", "{}")
            store.put("tags", '{"t1": {}}')
        self.assertEqual(store.get("tags"), '{"t1": {}}')


class RedisBlobStoreTests(unittest.TestCase):
    @patch("knowledge_base.storage.redis.Redis.from_url")
    def test_prefixed_get_and_put(self, mock_from_url):
        client = MagicMock()
        client.get.return_value = b'[{"id": "a1"}]'
        mock_from_url.return_value = client

        store = RedisBlobStore(url="redis://localhost:6379/0", key_prefix="kb:")
        self.assertEqual(store.get("articles"), '[{"id": "a1"}]')
        client.get.assert_called_once_with("kb:articles")

        store.put("tags", "{}")
        client.set.assert_called_once_with("kb:tags", b"{}")

    @patch("knowledge_base.storage.redis.Redis.from_url")
    def test_missing_key_and_errors(self, mock_from_url):
        client = MagicMock()
        client.get.return_value = None
        client.set.side_effect = redis_exceptions.ConnectionError("down")
        mock_from_url.return_value = client

        store = RedisBlobStore(url="redis://localhost:6379/0")
        self.assertIsNone(store.get("articles"))
        with self.assertRaises(StoreError):
            store.put("articles", "[]")


class S3BlobStoreTests(unittest.TestCase):
    def make_store(self, mock_client_factory):
        client = MagicMock()
        mock_client_factory.return_value = client
        store = S3BlobStore(
            bucket="bucket",
            region="ap-shanghai",
            endpoint="https://cos.example.test",
            access_key_id="id",
            secret_access_key="key",
        )
        return store, client

    @patch("knowledge_base.storage.boto3.client")
    def test_get_and_put(self, mock_client_factory):
        store, client = self.make_store(mock_client_factory)
        body = MagicMock()
        body.read.return_value = b"{}"
        client.get_object.return_value = {"Body": body}

        self.assertEqual(store.get("tags"), "{}")
        client.get_object.assert_called_once_with(Bucket="bucket", Key="kb/tags.json")

        store.put("tags", "{}")
        client.put_object.assert_called_once_with(
            Bucket="bucket",
            Key="kb/tags.json",
            Body=b"{}",
            ContentType="application/json",
        )

    @patch("knowledge_base.storage.boto3.client")
    def test_missing_object_is_absent(self, mock_client_factory):
        store, client = self.make_store(mock_client_factory)
        client.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        self.assertIsNone(store.get("articles"))

    @patch("knowledge_base.storage.boto3.client")
    def test_other_errors_raise_store_error(self, mock_client_factory):
        store, client = self.make_store(mock_client_factory)
        client.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "no"}}, "GetObject"
        )
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "no"}}, "PutObject"
        )
        with self.assertRaises(StoreError):
            store.get("articles")
        with self.assertRaises(StoreError):
            store.put("articles", "[]")


class BuildStoreTests(unittest.TestCase):
    def test_default_is_in_memory_and_not_configured(self):
        settings = Settings(_env_file=None, kb_store_backend=None)
        store, backend = build_store(settings)
        self.assertIsInstance(store, InMemoryBlobStore)
        self.assertEqual(backend, "memory")
        self.assertFalse(build_context(settings).kv_configured)

    def test_sql_backend(self):
        settings = Settings(
            _env_file=None,
            kb_store_backend="sql",
            database_url="sqlite+pysqlite:///:memory:",
        )
        store, backend = build_store(settings)
        self.assertIsInstance(store, SqlBlobStore)
        self.assertEqual(backend, "sql")

    def test_redis_backend_requires_url(self):
        settings = Settings(_env_file=None, kb_store_backend="redis", redis_url=None)
        with self.assertRaises(ValueError):
            build_store(settings)

    def test_unknown_backend(self):
        settings = Settings(_env_file=None, kb_store_backend="etcd")
        with self.assertRaises(ValueError):
            build_store(settings)


if __name__ == "__main__":
    unittest.main()
