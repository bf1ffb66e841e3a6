from __future__ import annotations

import hashlib
import unittest

from fastapi.testclient import TestClient

from string_analyzer.config import Settings
from string_analyzer.main import create_app
from string_analyzer.models.string_record import StringRecord

NL_PATH = "/strings/filter-by-natural-language"


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        app = create_app(Settings(database_url="sqlite://"))
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)

    def ingest(self, *values: str) -> None:
        for value in values:
            resp = self.client.post("/strings", json={"value": value})
            self.assertEqual(resp.status_code, 201, resp.text)


class TestIngest(ApiTestCase):
    def test_racecar(self) -> None:
        resp = self.client.post("/strings", json={"value": "racecar"})
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        digest = hashlib.sha256(b"racecar").hexdigest()
        self.assertEqual(body["id"], digest)
        self.assertEqual(body["value"], "racecar")
        props = body["properties"]
        self.assertEqual(props["length"], 7)
        self.assertTrue(props["is_palindrome"])
        self.assertEqual(props["word_count"], 1)
        self.assertEqual(props["sha256_hash"], digest)
        self.assertEqual(props["character_frequency_map"], {"r": 2, "a": 2, "c": 2, "e": 1})
        self.assertEqual(set(props["unique_characters"]), {"r", "a", "c", "e"})
        self.assertTrue(body["created_at"])

    def test_empty_string_is_a_value(self) -> None:
        resp = self.client.post("/strings", json={"value": ""})
        self.assertEqual(resp.status_code, 201)
        props = resp.json()["properties"]
        self.assertEqual(props["length"], 0)
        self.assertTrue(props["is_palindrome"])
        self.assertEqual(props["word_count"], 1)

    def test_extra_fields_are_ignored(self) -> None:
        resp = self.client.post("/strings", json={"value": "abc", "other": 1})
        self.assertEqual(resp.status_code, 201)

    def test_duplicate_is_rejected(self) -> None:
        self.ingest("hello world")
        resp = self.client.post("/strings", json={"value": "hello world"})
        self.assertEqual(resp.status_code, 409)
        self.assertIn("error", resp.json())
        listing = self.client.get("/strings").json()
        self.assertEqual(listing["count"], 1)

    def test_missing_value(self) -> None:
        for body in ({}, {"value": None}, {"other": "x"}):
            resp = self.client.post("/strings", json=body)
            self.assertEqual(resp.status_code, 400, body)
            self.assertIn("error", resp.json())

    def test_non_string_value(self) -> None:
        for value in (123, 4.5, True, ["a"], {"a": 1}):
            resp = self.client.post("/strings", json={"value": value})
            self.assertEqual(resp.status_code, 422, value)
            self.assertIn("error", resp.json())

    def test_body_that_is_not_an_object(self) -> None:
        resp = self.client.post("/strings", content=b"not json", headers={"Content-Type": "application/json"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Validation failed")


class TestLookupAndDelete(ApiTestCase):
    def test_get_by_value(self) -> None:
        self.ingest("hello world")
        resp = self.client.get("/strings/hello world")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["value"], "hello world")
        self.assertEqual(resp.json()["properties"]["word_count"], 2)

    def test_get_missing(self) -> None:
        resp = self.client.get("/strings/nothing-here")
        self.assertEqual(resp.status_code, 404)
        self.assertIn("error", resp.json())

    def test_delete(self) -> None:
        self.ingest("bye")
        resp = self.client.delete("/strings/bye")
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(resp.content, b"")
        self.assertEqual(self.client.get("/strings/bye").status_code, 404)
        self.assertEqual(self.client.delete("/strings/bye").status_code, 404)

    def test_reingest_after_delete(self) -> None:
        self.ingest("again")
        self.client.delete("/strings/again")
        self.ingest("again")


class TestStructuredQuery(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ingest("racecar", "ab", "level", "xy", "Zigzag road")

    def values(self, resp) -> set:
        self.assertEqual(resp.status_code, 200, resp.text)
        return {item["value"] for item in resp.json()["data"]}

    def test_no_filters(self) -> None:
        resp = self.client.get("/strings")
        self.assertEqual(self.values(resp), {"racecar", "ab", "level", "xy", "Zigzag road"})
        self.assertEqual(resp.json()["count"], 5)
        self.assertEqual(resp.json()["filters_applied"], {})

    def test_min_length_and_palindrome(self) -> None:
        resp = self.client.get("/strings", params={"min_length": "5", "is_palindrome": "true"})
        self.assertEqual(self.values(resp), {"racecar", "level"})
        self.assertEqual(resp.json()["filters_applied"], {"min_length": "5", "is_palindrome": "true"})

    def test_is_palindrome_anything_else_is_false(self) -> None:
        for raw in ("false", "yes", "TRUE"):
            resp = self.client.get("/strings", params={"is_palindrome": raw})
            self.assertEqual(self.values(resp), {"ab", "xy", "Zigzag road"})

    def test_length_bounds_and_word_count(self) -> None:
        resp = self.client.get("/strings", params={"max_length": "2"})
        self.assertEqual(self.values(resp), {"ab", "xy"})
        resp = self.client.get("/strings", params={"word_count": "2"})
        self.assertEqual(self.values(resp), {"Zigzag road"})

    def test_contains_character(self) -> None:
        resp = self.client.get("/strings", params={"contains_character": "z"})
        self.assertEqual(self.values(resp), {"Zigzag road"})

    def test_malformed_numbers_are_rejected(self) -> None:
        for params in ({"min_length": "five"}, {"word_count": "-1"}, {"max_length": "1.5"}):
            resp = self.client.get("/strings", params=params)
            self.assertEqual(resp.status_code, 400, params)
            self.assertEqual(resp.json()["error"], "Validation failed")


class TestPhraseQuery(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ingest("short", "a much longer string than ten", "anna", "level", "eve", "pizza")

    def test_longer_than_ten(self) -> None:
        phrase = "strings longer than 10 characters"
        resp = self.client.get(NL_PATH, params={"query": phrase})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual([d["value"] for d in body["data"]], ["a much longer string than ten"])
        self.assertEqual(body["count"], 1)
        self.assertEqual(body["interpreted_query"], {
            "original": phrase,
            "parsed_filters": {"length": {"gt": 10}},
        })

    def test_single_word_palindromes(self) -> None:
        resp = self.client.get(NL_PATH, params={"query": "all single word palindromic strings"})
        body = resp.json()
        self.assertEqual({d["value"] for d in body["data"]}, {"anna", "level", "eve"})
        self.assertEqual(body["interpreted_query"]["parsed_filters"], {"word_count": 1, "is_palindrome": True})

    def test_first_vowel_via_q_alias(self) -> None:
        resp = self.client.get(NL_PATH, params={"q": "palindromic strings that contain the first vowel"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual({d["value"] for d in resp.json()["data"]}, {"anna", "eve"})

    def test_letter_z(self) -> None:
        resp = self.client.get(NL_PATH, params={"query": "strings containing the letter z"})
        self.assertEqual({d["value"] for d in resp.json()["data"]}, {"pizza"})

    def test_conflicting_phrase(self) -> None:
        resp = self.client.get(NL_PATH, params={"query": "palindromic strings that are not palindromes"})
        self.assertEqual(resp.status_code, 422)
        self.assertIn("conflicting", resp.json()["error"])

    def test_unparseable_phrase(self) -> None:
        resp = self.client.get(NL_PATH, params={"query": "xyzzy"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Unable to parse natural language query")

    def test_missing_phrase(self) -> None:
        for params in ({}, {"query": ""}):
            resp = self.client.get(NL_PATH, params=params)
            self.assertEqual(resp.status_code, 400)
            self.assertIn("required", resp.json()["error"])


class TestServiceEndpoints(ApiTestCase):
    def test_root_and_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"status": "healthy"})
        self.assertIn("endpoints", self.client.get("/").json())

    def test_unknown_route(self) -> None:
        resp = self.client.get("/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Not Found"})

    def test_validation_details_name_the_parameter(self) -> None:
        resp = self.client.get("/strings", params={"min_length": "five"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("query.min_length", resp.json()["details"])

    def test_store_failure_is_reported_and_not_fatal(self) -> None:
        engine = self.client.app.state.engine
        StringRecord.__table__.drop(engine)

        resp = self.client.get("/strings")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Storage operation failed"})
        resp = self.client.post("/strings", json={"value": "abc"})
        self.assertEqual(resp.status_code, 500)

        # the service keeps answering
        self.assertEqual(self.client.get("/health").status_code, 200)
        StringRecord.__table__.create(engine)
        self.ingest("abc")
        self.assertEqual(self.client.get("/strings").json()["count"], 1)


if __name__ == "__main__":
    unittest.main()
