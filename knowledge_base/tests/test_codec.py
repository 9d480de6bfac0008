import json
import unittest

from knowledge_base import codec


class CodecTests(unittest.TestCase):
    def test_absent_documents_decode_to_empty(self):
        self.assertEqual(codec.decode("articles", None), [])
        self.assertEqual(codec.decode("categories", None), {})
        self.assertEqual(codec.decode("tags", None), {})

    def test_malformed_documents_decode_to_empty(self):
        with self.assertLogs("knowledge_base.codec", level="WARNING"):
            self.assertEqual(codec.decode_articles("[{"), [])
        with self.assertLogs("knowledge_base.codec", level="WARNING"):
            self.assertEqual(codec.decode_mapping("tags", "nope"), {})

    def test_unexpected_json_types_decode_to_empty(self):
        with self.assertLogs("knowledge_base.codec", level="WARNING"):
            self.assertEqual(codec.decode_articles("42"), [])
        with self.assertLogs("knowledge_base.codec", level="WARNING"):
            self.assertEqual(codec.decode_mapping("categories", "[1, 2]"), {})

    def test_mapping_articles_normalize_to_values_in_order(self):
        text = json.dumps({"z": {"id": "z"}, "a": {"id": "a"}, "m": {"id": "m"}})
        self.assertEqual(
            [a["id"] for a in codec.decode_articles(text)], ["z", "a", "m"]
        )

    def test_round_trip_of_canonical_shapes(self):
        articles = [
            {
                "id": "a1",
                "title": "Título",
                "content": "**bold**",
                "categoryId": None,
                "tagIds": ["t1", "missing"],
                "published": True,
                "createdAt": "2024-01-01T00:00:00.000Z",
                "updatedAt": "2024-01-02T00:00:00.000Z",
            }
        ]
        categories = {"c1": {"id": "c1", "name": "Go"}}
        self.assertEqual(codec.decode("articles", codec.encode(articles)), articles)
        self.assertEqual(codec.decode("categories", codec.encode(categories)), categories)

    def test_encode_preserves_mapping_shape(self):
        articles = {"a1": {"id": "a1"}}
        self.assertEqual(json.loads(codec.encode(articles)), articles)

    def test_filter_published(self):
        articles = [
            {"id": "a", "published": True},
            {"id": "b", "published": False},
            {"id": "c", "published": 1},
            "garbage",
            {"id": "d", "published": True},
        ]
        self.assertEqual(
            [a["id"] for a in codec.filter_published(articles)], ["a", "d"]
        )


class ArticleReferencesTests(unittest.TestCase):
    def setUp(self):
        self.refs = codec.ArticleReferences.from_articles(
            [
                {"id": "a1", "categoryId": "c1", "tagIds": ["t1", "t2", "t1"]},
                {"id": "a2", "categoryId": None, "tagIds": ["t2"]},
                {"id": "a3", "categoryId": "c1"},
                "not a record",
            ]
        )

    def test_skips_non_records(self):
        self.assertEqual([a["id"] for a in self.refs.records], ["a1", "a2", "a3"])

    def test_usage_counts(self):
        self.assertEqual(self.refs.category_usage(), {"c1": 2})
        self.assertEqual(self.refs.tag_usage(), {"t1": 1, "t2": 2})


if __name__ == "__main__":
    unittest.main()
