import os

# Credentials and endpoint for the in-process DynamoDB fake, set before evently.config is read
os.environ["DYNAMODB_ENDPOINT_URL"] = ""
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

import boto3
import pytest
from moto import mock_aws

from evently.database.dynamodb import create_table_if_not_exists, delete_table

TEST_TABLE_NAME = "Evently_Test"


@pytest.fixture(scope="session")
def dynamodb_table():
    """Create test DynamoDB table for the session"""
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="us-east-1")
        table = create_table_if_not_exists(TEST_TABLE_NAME, resource)

        yield table

        # Cleanup: Delete test table
        delete_table(TEST_TABLE_NAME, resource)


@pytest.fixture
def dynamodb_resource(dynamodb_table):
    """Get DynamoDB resource for tests"""
    resource = boto3.resource("dynamodb", region_name="us-east-1")

    # Clean up the table before each test
    table = resource.Table(TEST_TABLE_NAME)

    scan_kwargs = {"ProjectionExpression": "PK, SK"}
    while True:
        response = table.scan(**scan_kwargs)
        for item in response.get("Items", []):
            table.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
        if "LastEvaluatedKey" not in response:
            break
        scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    return resource


@pytest.fixture
def event_data():
    """Valid event payload"""
    return {
        "title": "Tech Innovation Summit",
        "description": "Talks and workshops on AI and sustainable tech",
        "date": "2024-03-15",
        "time": "09:00",
        "location": "San Francisco Convention Center",
        "maxAttendees": 100,
        "price": 299,
        "image": "https://example.com/summit.jpg",
        "category": "Technology",
        "organizer": "TechVision Inc.",
        "tags": ["AI", "Networking"],
    }
