import logging
from decimal import Decimal
from typing import Dict, List, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from exceptions import SchedulingConflictError, StoreQueryError, StoreWriteError

logger = logging.getLogger(__name__)

serializer = TypeSerializer()
deserializer = TypeDeserializer()

APPOINTMENT_TIME_INDEX = 'appointmentTimeIndex'
SLOT_LOCK_PREFIX = 'SLOT#'


def create_dynamodb_client(config):
    """DynamoDB client for the configured region, or DynamoDB Local when offline"""
    client_kwargs = {'region_name': config.region}
    if config.endpoint_url:
        client_kwargs['endpoint_url'] = config.endpoint_url
        logger.info(f"Using DynamoDB endpoint {config.endpoint_url}")
    return boto3.client('dynamodb', **client_kwargs)


def error_details(error):
    """Pull (message, code) out of a botocore failure"""
    if isinstance(error, ClientError):
        err = error.response.get('Error', {})
        return err.get('Message') or str(error), err.get('Code')
    return str(error), type(error).__name__


class AppointmentStore:
    """Appointments table access: the conflict-check query and the conditional writes"""

    def __init__(self, config, client=None):
        self.config = config
        self.table_name = config.table_name
        self.location_time_index = config.location_time_index
        self.dynamodb = client or create_dynamodb_client(config)

    def query_by_location_time_key(self, location_time_key: str) -> List[Dict]:
        """
        Find appointments already booked for a location/time slot

        Args:
            location_time_key: Derived "<location>#<appointmentTime>" key

        Returns:
            Matching appointment records (empty when the slot is free)

        Raises:
            StoreQueryError: If the query itself fails
        """
        params = {
            'TableName': self.table_name,
            'IndexName': self.location_time_index,
            'KeyConditionExpression': 'locationTimeKey = :locationTimeKey',
            'ExpressionAttributeValues': {
                ':locationTimeKey': serializer.serialize(location_time_key)
            }
        }
        logger.info(f"Checking for existing appointments with params: {params}")

        try:
            result = self.dynamodb.query(**params)
        except (ClientError, BotoCoreError) as e:
            message, code = error_details(e)
            logger.error(f"Error checking appointment availability - Code: {code}, Message: {message}")
            raise StoreQueryError(message, code, self.table_name, params)

        items = [deserialize_item_json_safe(item) for item in result.get('Items', [])]
        logger.info(f"Query returned {len(items)} appointment(s) for {location_time_key}")
        return items

    def put_if_id_absent(self, record: Dict) -> None:
        """
        Insert an appointment unless an item with the same id exists

        The condition guards against reusing a generated id, it does not
        stop two appointments sharing a locationTimeKey.

        Raises:
            StoreWriteError: If the write fails or the id is taken
        """
        params = {
            'TableName': self.table_name,
            'Item': serialize_item(record),
            'ConditionExpression': 'attribute_not_exists(id)'
        }
        logger.info(f"Writing appointment {record['id']} to {self.table_name}")

        try:
            self.dynamodb.put_item(**params)
        except (ClientError, BotoCoreError) as e:
            message, code = error_details(e)
            logger.error(f"Error creating appointment - Code: {code}, Message: {message}")
            raise StoreWriteError(message, code, self.table_name, params)

        logger.info(f"Appointment {record['id']} created successfully")

    def put_with_slot_lock(self, record: Dict) -> None:
        """
        Insert an appointment and its slot lock in one transaction

        The lock item is keyed by SLOT#<locationTimeKey>, so a second booking
        for the same slot fails its condition even when both requests passed
        the conflict-check query.

        Raises:
            SchedulingConflictError: If the slot lock already exists
            StoreWriteError: For any other write failure
        """
        lock_item = {
            'id': slot_lock_id(record['locationTimeKey']),
            'appointmentId': record['id'],
            'createdAt': record['createdAt']
        }
        params = {
            'TransactItems': [
                {
                    'Put': {
                        'TableName': self.table_name,
                        'Item': serialize_item(record),
                        'ConditionExpression': 'attribute_not_exists(id)'
                    }
                },
                {
                    'Put': {
                        'TableName': self.table_name,
                        'Item': serialize_item(lock_item),
                        'ConditionExpression': 'attribute_not_exists(id)'
                    }
                }
            ]
        }
        logger.info(f"Writing appointment {record['id']} with slot lock {lock_item['id']}")

        try:
            self.dynamodb.transact_write_items(**params)
        except ClientError as e:
            if slot_lock_conflict(e):
                logger.warning(f"Slot lock already held: {lock_item['id']}")
                raise SchedulingConflictError(record['locationTimeKey'])
            message, code = error_details(e)
            logger.error(f"Error creating appointment - Code: {code}, Message: {message}")
            raise StoreWriteError(message, code, self.table_name, params)
        except BotoCoreError as e:
            message, code = error_details(e)
            logger.error(f"Error creating appointment - Code: {code}, Message: {message}")
            raise StoreWriteError(message, code, self.table_name, params)

        logger.info(f"Appointment {record['id']} created successfully")

    def create_table(self) -> Optional[Dict]:
        """
        Create the appointments table with its secondary indexes

        Intended for DynamoDB Local; deployed tables are managed by infrastructure.
        Returns the table description, or None if the table already exists.
        """
        try:
            result = self.dynamodb.create_table(
                TableName=self.table_name,
                BillingMode='PAY_PER_REQUEST',
                AttributeDefinitions=[
                    {'AttributeName': 'id', 'AttributeType': 'S'},
                    {'AttributeName': 'appointmentTime', 'AttributeType': 'S'},
                    {'AttributeName': 'locationTimeKey', 'AttributeType': 'S'}
                ],
                KeySchema=[
                    {'AttributeName': 'id', 'KeyType': 'HASH'}
                ],
                GlobalSecondaryIndexes=[
                    {
                        'IndexName': APPOINTMENT_TIME_INDEX,
                        'KeySchema': [{'AttributeName': 'appointmentTime', 'KeyType': 'HASH'}],
                        'Projection': {'ProjectionType': 'ALL'}
                    },
                    {
                        'IndexName': self.location_time_index,
                        'KeySchema': [{'AttributeName': 'locationTimeKey', 'KeyType': 'HASH'}],
                        'Projection': {'ProjectionType': 'ALL'}
                    }
                ]
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'ResourceInUseException':
                logger.info(f"Table {self.table_name} already exists")
                return None
            raise

        logger.info(f"Created table {self.table_name}")
        return result.get('TableDescription')


def prepare_local_table(config, store):
    """
    Create the appointments table on DynamoDB Local when running offline

    Returns True when the table was created or already exists. A local
    endpoint that is not up yet is logged, not raised, so the function can
    still start.
    """
    if not config.is_offline:
        return False
    try:
        store.create_table()
    except (ClientError, BotoCoreError) as e:
        message, code = error_details(e)
        logger.warning(f"Could not prepare local table {config.table_name} - Code: {code}, Message: {message}")
        return False
    return True


def slot_lock_id(location_time_key):
    return f"{SLOT_LOCK_PREFIX}{location_time_key}"


def slot_lock_conflict(error):
    """True when a transaction was cancelled because the slot lock condition failed"""
    if error.response.get('Error', {}).get('Code') != 'TransactionCanceledException':
        return False
    reasons = error.response.get('CancellationReasons') or []
    return len(reasons) > 1 and reasons[1].get('Code') == 'ConditionalCheckFailed'

# -------------------------------------------------------------

def serialize_item(item):
    return {k: serializer.serialize(v) for k, v in item.items()}

def deserialize_item_json_safe(item):
    """Deserialize DynamoDB item and convert Decimal objects to JSON-safe types"""
    if not item:
        return None

    deserialized = {k: deserializer.deserialize(v) for k, v in item.items()}

    def convert_decimals(obj):
        if isinstance(obj, Decimal):
            return int(obj) if obj % 1 == 0 else float(obj)
        elif isinstance(obj, dict):
            return {k: convert_decimals(v) for k, v in obj.items()}
        elif isinstance(obj, (list, set)):
            return [convert_decimals(i) for i in obj]
        return obj

    return convert_decimals(deserialized)
