import logging
import time
from decimal import Decimal
from typing import Any, Dict, List

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from evently import config

logger = logging.getLogger(__name__)

# Secondary indexes of the single Evently table, each keyed by <name>_PK / <name>_SK
GLOBAL_SECONDARY_INDEXES = [
    "GSI_EventsByDate",
    "GSI_RegistrationById",
    "GSI_RegistrationsByEmail",
    "GSI_RegistrationsByPhone",
    "GSI_RegistrationTimeline",
]


def get_db_connection():
    try:
        dynamodb = boto3.resource(
            "dynamodb",
            endpoint_url=config.DYNAMODB_ENDPOINT_URL or None,
            region_name=config.AWS_DEFAULT_REGION,
            aws_access_key_id=config.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
        )
        return dynamodb
    except NoCredentialsError:
        logger.error("DynamoDB credentials not available")
        return None


def create_table_if_not_exists(table_name=config.TABLE_NAME, dynamodb=None):
    """Create the Evently table with its GSIs if it doesn't exist"""
    dynamodb = dynamodb or get_db_connection()

    try:
        table = dynamodb.Table(table_name)
        table.table_status
        logger.info("Table %s already exists", table_name)
        return table
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise

    attribute_definitions = [
        {"AttributeName": "PK", "AttributeType": "S"},
        {"AttributeName": "SK", "AttributeType": "S"},
    ]
    indexes = []
    for index_name in GLOBAL_SECONDARY_INDEXES:
        attribute_definitions.append(
            {"AttributeName": f"{index_name}_PK", "AttributeType": "S"}
        )
        attribute_definitions.append(
            {"AttributeName": f"{index_name}_SK", "AttributeType": "S"}
        )
        indexes.append(
            {
                "IndexName": index_name,
                "KeySchema": [
                    {"AttributeName": f"{index_name}_PK", "KeyType": "HASH"},
                    {"AttributeName": f"{index_name}_SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        )

    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=attribute_definitions,
        BillingMode="PAY_PER_REQUEST",
        GlobalSecondaryIndexes=indexes,
    )

    logger.info("Creating table %s...", table_name)
    table.wait_until_exists()

    # GSIs may still be backfilling after the table itself is active
    while True:
        table.reload()
        gsi_statuses = [
            gsi["IndexStatus"] for gsi in table.global_secondary_indexes or []
        ]
        if all(status == "ACTIVE" for status in gsi_statuses):
            break
        time.sleep(1)

    logger.info("Table %s created successfully", table_name)
    return table


def delete_table(table_name=config.TABLE_NAME, dynamodb=None):
    """Delete the Evently table"""
    dynamodb = dynamodb or get_db_connection()

    try:
        table = dynamodb.Table(table_name)
        table.delete()
        table.wait_until_not_exists()
        logger.info("Table %s deleted successfully", table_name)
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise
        logger.info("Table %s does not exist", table_name)


def to_dynamodb_number(value):
    """boto3 rejects floats, so numbers go in as Decimal"""
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def from_dynamodb_number(value):
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def clean_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Strip key/index attributes and convert Decimals back to int/float"""
    cleaned = {}
    for k, v in item.items():
        if k in ("PK", "SK") or k.startswith("GSI_"):
            continue
        if isinstance(v, list):
            v = [from_dynamodb_number(x) for x in v]
        cleaned[k] = from_dynamodb_number(v)
    return cleaned


def query_all(table, **query_params) -> List[Dict[str, Any]]:
    """Run a query following LastEvaluatedKey until exhausted"""
    items = []
    while True:
        response = table.query(**query_params)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        query_params["ExclusiveStartKey"] = last_key
