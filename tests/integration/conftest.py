import json

import boto3
import pytest
from moto import mock_aws

from testrun_stream.config import DEFAULT_EVENT_SOURCE


@pytest.fixture
def dynamodb_table():
    """
    Spins up a mock DynamoDB instance with a test-run table keyed on ``id``
    and yields the table name.
    """
    with mock_aws():
        dynamodb = boto3.client("dynamodb", region_name="us-east-1")

        table_name = "TestRuns"
        dynamodb.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[
                {"AttributeName": "id", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        dynamodb.get_waiter("table_exists").wait(TableName=table_name)

        yield table_name


@pytest.fixture
def event_bus():
    """
    Creates a mock EventBridge bus with a rule forwarding every test-run
    event to an SQS queue. Yields ``(bus_name, queue_url)``.
    """
    with mock_aws():
        events = boto3.client("events", region_name="us-east-1")
        sqs = boto3.client("sqs", region_name="us-east-1")

        bus_name = "testruns-bus"
        events.create_event_bus(Name=bus_name)

        queue_url = sqs.create_queue(QueueName="testrun-events")["QueueUrl"]
        queue_arn = sqs.get_queue_attributes(
            QueueUrl=queue_url, AttributeNames=["QueueArn"]
        )["Attributes"]["QueueArn"]

        events.put_rule(
            Name="all-testrun-events",
            EventBusName=bus_name,
            EventPattern=json.dumps({"source": [DEFAULT_EVENT_SOURCE]}),
        )
        events.put_targets(
            Rule="all-testrun-events",
            EventBusName=bus_name,
            Targets=[{"Id": "queue", "Arn": queue_arn}],
        )

        yield bus_name, queue_url
