# User value: This test guarantees the translation service always receives the same well-formed batch document.
import json
import unittest

from schemas.translation import build_translation_request, render_translation_request

SOURCE_URL = "https://example.com/sourceSASUrl"
TARGET_URL = "https://example.com/targetSASUrl"

EXPECTED = """{
  "inputs": [
    {
      "storageType": "File",
      "source": {
        "sourceUrl": "https://example.com/sourceSASUrl",
        "language": "en"
      },
      "targets": [
        {
          "targetUrl": "https://example.com/targetSASUrl",
          "language": "fr"
        }
      ]
    }
  ]
}"""


class TranslationRequestUnitTests(unittest.TestCase):
    def test_document_fields(self):
        doc = json.loads(render_translation_request(SOURCE_URL, TARGET_URL, "en", "fr"))
        batch_input = doc["inputs"][0]
        self.assertEqual(batch_input["storageType"], "File")
        self.assertEqual(batch_input["source"]["sourceUrl"], SOURCE_URL)
        self.assertEqual(batch_input["source"]["language"], "en")
        self.assertEqual(batch_input["targets"][0]["targetUrl"], TARGET_URL)
        self.assertEqual(batch_input["targets"][0]["language"], "fr")

    def test_document_is_byte_identical_across_calls(self):
        first = render_translation_request(SOURCE_URL, TARGET_URL, "en", "fr")
        second = render_translation_request(SOURCE_URL, TARGET_URL, "en", "fr")
        self.assertEqual(first, second)
        self.assertEqual(first, EXPECTED)

    # User value: an empty source language lets the service auto-detect it.
    def test_empty_source_language_is_omitted(self):
        doc = json.loads(render_translation_request(SOURCE_URL, TARGET_URL, "", "fr"))
        self.assertNotIn("language", doc["inputs"][0]["source"])
        self.assertEqual(doc["inputs"][0]["targets"][0]["language"], "fr")

    def test_exactly_one_input_and_one_target(self):
        request = build_translation_request(SOURCE_URL, TARGET_URL, None, "de")
        self.assertEqual(len(request.inputs), 1)
        self.assertEqual(len(request.inputs[0].targets), 1)
        self.assertIsNone(request.inputs[0].source.language)


if __name__ == "__main__":
    unittest.main()
