"""
Unit tests for the hello Lambda handler
Tests the response contract for regular and malformed events
"""
import json
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from cdk_demo.handlers.hello_world import index


def _proxy_event(method="GET", path="/"):
    return {
        "resource": "/",
        "path": path,
        "httpMethod": method,
        "headers": {"Accept": "application/json"},
        "queryStringParameters": None,
        "body": None,
        "isBase64Encoded": False,
    }


class TestHelloHandler(unittest.TestCase):
    """Test the response returned for GET /"""

    def test_status_and_headers(self):
        response = index.lambda_handler(_proxy_event(), None)

        self.assertEqual(response["statusCode"], 200)
        self.assertEqual(response["headers"]["Access-Control-Allow-Origin"], "*")
        self.assertEqual(response["headers"]["Content-Type"], "application/json")

    def test_body(self):
        response = index.lambda_handler(_proxy_event(), None)
        body = json.loads(response["body"])

        self.assertEqual(body["message"], "Hello from Lambda!")
        timestamp = datetime.fromisoformat(body["timestamp"])
        self.assertIsNotNone(timestamp.tzinfo)

    def test_headers_not_shared_between_responses(self):
        first = index.lambda_handler(_proxy_event(), None)
        first["headers"]["X-Extra"] = "1"
        second = index.lambda_handler(_proxy_event(), None)
        self.assertNotIn("X-Extra", second["headers"])

    def test_any_event_gets_the_same_answer(self):
        """The handler never raises and never inspects the request"""
        events = [
            None,
            {},
            "not an event",
            b"\x00\xff",
            [1, 2, 3],
            42,
            {"httpMethod": None, "path": {"nested": True}},
            {"body": "{broken json"},
            _proxy_event("POST", "/anything"),
        ]
        for event in events:
            with self.subTest(event=event):
                response = index.lambda_handler(event, object())
                self.assertEqual(response["statusCode"], 200)
                body = json.loads(response["body"])
                self.assertTrue(body["message"])
                datetime.fromisoformat(body["timestamp"])

    def test_timestamp_follows_clock(self):
        earlier = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
        later = datetime(2024, 5, 1, 12, 0, 1, tzinfo=timezone.utc)

        with patch.object(index, "_utc_now", side_effect=[earlier, later]):
            first = json.loads(index.lambda_handler(_proxy_event(), None)["body"])
            second = json.loads(index.lambda_handler(_proxy_event(), None)["body"])

        self.assertEqual(first["message"], second["message"])
        self.assertNotEqual(first["timestamp"], second["timestamp"])
        self.assertEqual(first["timestamp"], "2024-05-01T12:00:00+00:00")


if __name__ == "__main__":
    unittest.main()
