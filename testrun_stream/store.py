"""
Test-run store interface and its DynamoDB adapter.

Used by the HTTP handlers; the stream pipeline never touches the store.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from testrun_stream.errors import DecodeError, InvalidAttributeValueError, StoreError
from testrun_stream.models import TestRun
from testrun_stream.parsing.record_codec import item_to_testrun, testrun_to_item

logger = logging.getLogger(__name__)


class TestRunStore(Protocol):
    """Get, put and delete test runs by id."""

    def get(self, testrun_id: str) -> Optional[TestRun]:
        """Return the test run, or None if it does not exist."""

    def put(self, testrun: TestRun) -> None:
        """Create or replace a test run."""

    def delete(self, testrun_id: str) -> None:
        """Delete a test run; deleting a missing id is not an error."""


class DynamoTestRunStore:
    """TestRunStore backed by a DynamoDB table keyed on ``id``."""

    def __init__(self, client: Any, table_name: str):
        self._client = client
        self.table_name = table_name

    @classmethod
    def from_table_name(cls, table_name: str) -> "DynamoTestRunStore":
        return cls(boto3.client("dynamodb"), table_name)

    def _key(self, testrun_id: str) -> dict[str, dict[str, str]]:
        return {"id": {"S": testrun_id}}

    def get(self, testrun_id: str) -> Optional[TestRun]:
        logger.info(
            "Getting test run from DynamoDB",
            extra={"testrun_id": testrun_id, "table_name": self.table_name},
        )
        try:
            response = self._client.get_item(
                TableName=self.table_name, Key=self._key(testrun_id)
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(f"Could not get test run {testrun_id}: {exc}") from exc

        item = response.get("Item")
        if not item:
            return None
        try:
            return item_to_testrun(item)
        except (DecodeError, InvalidAttributeValueError) as exc:
            raise StoreError(
                f"Stored test run {testrun_id} is malformed: {exc}"
            ) from exc

    def put(self, testrun: TestRun) -> None:
        logger.info(
            "Putting test run into DynamoDB",
            extra={"testrun_id": testrun.id, "table_name": self.table_name},
        )
        try:
            self._client.put_item(
                TableName=self.table_name, Item=testrun_to_item(testrun)
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(f"Could not put test run {testrun.id}: {exc}") from exc

    def delete(self, testrun_id: str) -> None:
        logger.info(
            "Deleting test run from DynamoDB",
            extra={"testrun_id": testrun_id, "table_name": self.table_name},
        )
        try:
            self._client.delete_item(
                TableName=self.table_name, Key=self._key(testrun_id)
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(
                f"Could not delete test run {testrun_id}: {exc}"
            ) from exc


__all__ = ["DynamoTestRunStore", "TestRunStore"]
