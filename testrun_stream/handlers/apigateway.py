"""
API Gateway handlers for reading and submitting test runs.
"""

import base64
import binascii
import json
from typing import Any, Mapping, Optional

from testrun_stream.config import StoreConfig
from testrun_stream.errors import StoreError
from testrun_stream.models import TestRun
from testrun_stream.store import DynamoTestRunStore, TestRunStore
from testrun_stream.stream_types import (
    APIGatewayProxyEvent,
    APIGatewayResponse,
    LambdaContext,
)
from testrun_stream.utils.logging import get_operation_logger

logger = get_operation_logger(__name__)


def response(status_code: int, body: Mapping[str, Any]) -> APIGatewayResponse:
    """HTTP response with a JSON payload."""
    return {
        "statusCode": status_code,
        "body": json.dumps(body),
        "headers": {"Content-Type": "application/json"},
    }


def _path_id(event: APIGatewayProxyEvent) -> Optional[str]:
    path_parameters = event.get("pathParameters") or {}
    return path_parameters.get("id") or None


def _request_body(event: APIGatewayProxyEvent) -> Optional[str]:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body or None


def get_testrun(store: TestRunStore, event: APIGatewayProxyEvent) -> APIGatewayResponse:
    """Return the test run named by the ``id`` path parameter."""
    testrun_id = _path_id(event)
    if testrun_id is None:
        logger.warning("Missing 'id' parameter in path")
        return response(400, {"message": "Missing 'id' parameter in path"})

    logger.info("Fetching test run", testrun_id=testrun_id)
    try:
        testrun = store.get(testrun_id)
    except StoreError as exc:
        logger.error("Error fetching test run", testrun_id=testrun_id, error=str(exc))
        return response(500, {"message": "Error fetching testrun"})

    if testrun is None:
        logger.warning("Test run not found", testrun_id=testrun_id)
        return response(404, {"message": "TestRun not found"})
    return response(200, testrun.to_dict())


def put_testrun(store: TestRunStore, event: APIGatewayProxyEvent) -> APIGatewayResponse:
    """Validate the request body and store it under the path ``id``."""
    testrun_id = _path_id(event)
    if testrun_id is None:
        logger.warning("Missing 'id' parameter in path")
        return response(400, {"message": "Missing 'id' parameter in path"})

    try:
        body = _request_body(event)
    except (binascii.Error, UnicodeDecodeError) as exc:
        logger.warning("Failed to decode request body", error=str(exc))
        return response(
            400, {"message": "Failed to parse testrun from request body"}
        )
    if body is None:
        logger.warning("Missing testrun in request body")
        return response(400, {"message": "Missing testrun in request body"})

    try:
        testrun = TestRun.from_dict(json.loads(body))
    except ValueError as exc:
        logger.warning("Failed to parse testrun from request body", error=str(exc))
        return response(
            400, {"message": "Failed to parse testrun from request body"}
        )

    if testrun.id != testrun_id:
        logger.warning(
            "Test run id in path does not match id in body",
            path_id=testrun_id,
            body_id=testrun.id,
        )
        return response(
            400, {"message": "TestRun ID in path does not match ID in body"}
        )

    try:
        store.put(testrun)
    except StoreError as exc:
        logger.error("Failed to create test run", testrun_id=testrun.id, error=str(exc))
        return response(500, {"message": "Failed to create testrun"})

    logger.info("Queued test run", testrun_id=testrun.id)
    return response(201, {"message": "Testrun queued"})


def _store_from_env() -> DynamoTestRunStore:
    return DynamoTestRunStore.from_table_name(StoreConfig.from_env().table_name)


def get_handler(
    event: APIGatewayProxyEvent, context: Optional[LambdaContext] = None
) -> APIGatewayResponse:
    """Lambda entry point for ``GET /testruns/{id}``."""
    return get_testrun(_store_from_env(), event)


def put_handler(
    event: APIGatewayProxyEvent, context: Optional[LambdaContext] = None
) -> APIGatewayResponse:
    """Lambda entry point for ``PUT /testruns/{id}``."""
    return put_testrun(_store_from_env(), event)


__all__ = ["get_handler", "get_testrun", "put_handler", "put_testrun", "response"]
