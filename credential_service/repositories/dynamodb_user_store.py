"""DynamoDB user store implementation"""
import aioboto3
import logging
from datetime import datetime
from contextlib import asynccontextmanager
from typing import Optional

from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from credential_service.config import Settings, settings as default_settings
from credential_service.domain.user import User
from credential_service.errors import NotFoundError, StoreError
from credential_service.interfaces.user_store import IUserStore

logger = logging.getLogger(__name__)

USERNAME_MARKER_PREFIX = 'username#'


def username_marker_key(username: str) -> str:
    return f"{USERNAME_MARKER_PREFIX}{username}"


def user_to_item(user: User) -> dict:
    """Convert User domain object to DynamoDB item"""
    return {
        'user_id': user.user_id,
        'username': user.username,
        'email': user.email,
        'password_hash': bytes(user.password_hash),
        'salt': user.salt,
        'admin': user.admin,
        'admin_forced_password_reset': user.admin_forced_password_reset,
        'enabled': user.enabled,
        'created_at': user.created_at.isoformat(),
        'updated_at': user.updated_at.isoformat()
    }


def item_to_user(item: dict) -> User:
    """Convert DynamoDB item to User domain object"""
    password_hash = item['password_hash']
    # boto3 returns Binary wrappers for B attributes
    if hasattr(password_hash, 'value'):
        password_hash = password_hash.value

    return User(
        user_id=item['user_id'],
        username=item['username'],
        email=item['email'],
        password_hash=bytes(password_hash),
        salt=item['salt'],
        admin=item.get('admin', False),
        admin_forced_password_reset=item.get('admin_forced_password_reset', False),
        enabled=item.get('enabled', True),
        created_at=datetime.fromisoformat(item['created_at']),
        updated_at=datetime.fromisoformat(item['updated_at'])
    )


class DynamoDBUserStore(IUserStore):
    """
    DynamoDB implementation of user store.

    Usernames are kept unique with a marker item (user_id = 'username#<name>')
    written in the same transaction as the user item, guarded by a condition
    on the marker.
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.endpoint = settings.DYNAMODB_ENDPOINT
        self.region = settings.DYNAMODB_REGION
        self.access_key = settings.DYNAMODB_ACCESS_KEY
        self.secret_key = settings.DYNAMODB_SECRET_KEY
        self.table_name = settings.USERS_TABLE_NAME
        self._session = aioboto3.Session()
        self._serializer = TypeSerializer()

    @asynccontextmanager
    async def _get_resource(self):
        async with self._session.resource(
            'dynamodb',
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key
        ) as dynamodb:
            yield dynamodb

    @asynccontextmanager
    async def _get_table(self):
        """Get table within a context manager to properly manage the session lifecycle."""
        async with self._get_resource() as dynamodb:
            table = await dynamodb.Table(self.table_name)
            yield table

    @asynccontextmanager
    async def _get_client(self):
        """Low-level client, needed for transact_write_items."""
        async with self._get_resource() as dynamodb:
            yield dynamodb.meta.client

    async def ensure_table(self) -> bool:
        """Create the users table if it doesn't exist. Returns True if created."""
        async with self._get_resource() as dynamodb:
            try:
                logger.info(f"Creating '{self.table_name}' table...")
                table = await dynamodb.create_table(
                    TableName=self.table_name,
                    KeySchema=[
                        {'AttributeName': 'user_id', 'KeyType': 'HASH'}
                    ],
                    AttributeDefinitions=[
                        {'AttributeName': 'user_id', 'AttributeType': 'S'}
                    ],
                    BillingMode='PAY_PER_REQUEST'
                )
                await table.wait_until_exists()
                logger.info(f"'{self.table_name}' table created")
                return True
            except ClientError as e:
                if e.response['Error']['Code'] == 'ResourceInUseException':
                    logger.info(f"'{self.table_name}' table already exists")
                    return False
                raise StoreError(f"Failed to create table {self.table_name}: {e}") from e

    def _serialize(self, item: dict) -> dict:
        return {key: self._serializer.serialize(value) for key, value in item.items()}

    def _marker_put(self, user: User, condition: str) -> dict:
        put = {
            'Put': {
                'TableName': self.table_name,
                'Item': self._serialize({
                    'user_id': username_marker_key(user.username),
                    'owner_user_id': user.user_id
                }),
                'ConditionExpression': condition
            }
        }
        if ':owner' in condition:
            put['Put']['ExpressionAttributeValues'] = self._serialize({':owner': user.user_id})
        return put

    async def _transact(self, user: User, transact_items: list, action: str) -> None:
        """Run the marker + user writes, mapping condition failures to duplicates."""
        async with self._get_client() as client:
            try:
                await client.transact_write_items(TransactItems=transact_items)
            except ClientError as e:
                if e.response['Error']['Code'] == 'TransactionCanceledException':
                    reasons = [r.get('Code') for r in e.response.get('CancellationReasons', [])]
                    if reasons and reasons[0] == 'ConditionalCheckFailed':
                        raise StoreError(
                            f"Username '{user.username}' already exists",
                            duplicate=True
                        ) from e
                    if len(reasons) > 1 and reasons[1] == 'ConditionalCheckFailed':
                        raise StoreError(f"User {user.user_id} already exists", duplicate=True) from e
                logger.error(f"Failed to {action} user {user.user_id}: {e}")
                raise StoreError(f"Failed to {action} user {user.user_id}") from e

    async def create_user(self, user: User) -> User:
        """Create new user and claim its username atomically"""
        await self._transact(user, [
            self._marker_put(user, 'attribute_not_exists(user_id)'),
            {
                'Put': {
                    'TableName': self.table_name,
                    'Item': self._serialize(user_to_item(user)),
                    'ConditionExpression': 'attribute_not_exists(user_id)'
                }
            }
        ], 'create')

        logger.info(f"Created user: {user.user_id}")
        return user

    async def get_user_by_id(self, user_id: str) -> User:
        """Get user by ID"""
        if user_id.startswith(USERNAME_MARKER_PREFIX):
            raise NotFoundError(f"User {user_id} not found")

        async with self._get_table() as table:
            try:
                response = await table.get_item(Key={'user_id': user_id}, ConsistentRead=True)
            except ClientError as e:
                logger.error(f"Failed to get user {user_id}: {e}")
                raise StoreError(f"Failed to get user {user_id}") from e

        if 'Item' not in response:
            raise NotFoundError(f"User {user_id} not found")

        return item_to_user(response['Item'])

    async def save_user(self, user: User) -> None:
        """Replace the full user record; the username must be unclaimed or already ours"""
        await self._transact(user, [
            self._marker_put(user, 'attribute_not_exists(user_id) OR owner_user_id = :owner'),
            {
                'Put': {
                    'TableName': self.table_name,
                    'Item': self._serialize(user_to_item(user))
                }
            }
        ], 'save')

        logger.info(f"Saved user: {user.user_id}")
