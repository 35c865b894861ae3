import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.interpretation.decoder import (  # noqa: E402
    Provenance,
    decode_object_array,
    decode_string,
    decode_string_array,
)


class DecodeStringArrayTests(unittest.TestCase):
    def test_keeps_only_non_empty_strings(self):
        document = {"skills": ["Python", "", "  ", 42, None, True, {"a": 1}, ["x"], "  FastAPI  "]}
        field = decode_string_array(document, "skills")
        self.assertEqual(field.value, ["Python", "FastAPI"])
        self.assertEqual(field.provenance, Provenance.PARSED)

    def test_empty_result_from_present_array_is_still_parsed(self):
        field = decode_string_array({"skills": [1, 2, ""]}, "skills")
        self.assertEqual(field.value, [])
        self.assertTrue(field.parsed)

    def test_absent_or_wrong_kind_defaults_to_empty_list(self):
        cases = [
            {},
            {"skills": "Python"},
            {"skills": None},
            {"skills": {"0": "Python"}},
            {"skills": 3},
        ]
        for document in cases:
            with self.subTest(document=document):
                field = decode_string_array(document, "skills")
                self.assertEqual(field.value, [])
                self.assertTrue(field.defaulted)

    def test_non_object_documents_never_raise(self):
        for document in (None, [], ["skills"], "skills", 12, 1.5, True):
            with self.subTest(document=document):
                field = decode_string_array(document, "skills")
                self.assertEqual(field.value, [])
                self.assertEqual(field.provenance, Provenance.DEFAULTED)


class DecodeStringTests(unittest.TestCase):
    def test_present_string_is_trimmed(self):
        field = decode_string({"summary": "  Strong backend fit.  "}, "summary", "fallback")
        self.assertEqual(field.value, "Strong backend fit.")
        self.assertTrue(field.parsed)

    def test_wrong_kind_uses_default(self):
        for value in (None, 5, ["a"], {"b": 1}, False):
            with self.subTest(value=value):
                field = decode_string({"summary": value}, "summary", "fallback")
                self.assertEqual(field.value, "fallback")
                self.assertTrue(field.defaulted)

    def test_absent_key_uses_default(self):
        field = decode_string({}, "summary", "fallback")
        self.assertEqual(field.value, "fallback")
        self.assertEqual(field.provenance, Provenance.DEFAULTED)

    def test_defaulting_is_logged_at_debug(self):
        with self.assertLogs("app.interpretation.decoder", level="DEBUG") as logs:
            decode_string({"summary": 3}, "summary", "fallback")
        self.assertIn("field_defaulted key=summary reason=number", logs.output[0])


class DecodeObjectArrayTests(unittest.TestCase):
    def test_maps_objects_and_drops_everything_else(self):
        document = {"items": [{"name": "a"}, "b", 3, None, [], {"name": "c"}]}
        field = decode_object_array(document, "items", lambda item: item["name"])
        self.assertEqual(field.value, ["a", "c"])
        self.assertTrue(field.parsed)

    def test_absent_array_defaults(self):
        field = decode_object_array({"items": "nope"}, "items", lambda item: item)
        self.assertEqual(field.value, [])
        self.assertTrue(field.defaulted)


if __name__ == "__main__":
    unittest.main()
