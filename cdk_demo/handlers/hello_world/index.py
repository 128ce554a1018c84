"""
Hello World Lambda Function
Answers GET / on the REST API with a fixed greeting and the current time
"""
import json
import logging
import os
from datetime import datetime, timezone

# Configure logging
logger = logging.getLogger()
_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), None)
logger.setLevel(_level if isinstance(_level, int) else logging.INFO)

GREETING = "Hello from Lambda!"

RESPONSE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Content-Type": "application/json",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _describe_request(event) -> str:
    """Summarize an API Gateway proxy event for the log line"""
    if not isinstance(event, dict):
        return f"non-proxy event of type {type(event).__name__}"
    method = event.get("httpMethod", "?")
    path = event.get("path", "?")
    return f"{method} {path}"


def lambda_handler(event, context):
    """
    Return the greeting payload.

    The response does not depend on the request, so malformed or empty
    events are answered the same way as a regular GET /.
    """
    logger.info(f"Handling request: {_describe_request(event)}")

    body = {
        "message": GREETING,
        "timestamp": _utc_now().isoformat(),
    }

    return {
        "statusCode": 200,
        "headers": dict(RESPONSE_HEADERS),
        "body": json.dumps(body),
    }
