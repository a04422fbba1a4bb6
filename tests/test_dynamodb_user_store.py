"""Unit tests for DynamoDBUserStore with a mocked table and client."""
import pytest
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

from boto3.dynamodb.types import Binary
from botocore.exceptions import ClientError

from credential_service.errors import NotFoundError, StoreError
from credential_service.repositories.dynamodb_user_store import (
    DynamoDBUserStore,
    item_to_user,
    user_to_item,
)


def client_error(code: str, operation: str = 'PutItem') -> ClientError:
    return ClientError({'Error': {'Code': code, 'Message': code}}, operation)


def transaction_cancelled(*reason_codes: str) -> ClientError:
    return ClientError(
        {
            'Error': {'Code': 'TransactionCanceledException', 'Message': 'Transaction cancelled'},
            'CancellationReasons': [{'Code': code} for code in reason_codes]
        },
        'TransactWriteItems'
    )


@pytest.fixture
def mock_table():
    return AsyncMock()


@pytest.fixture
def mock_client():
    return AsyncMock()


@pytest.fixture
def store(test_settings, mock_table, mock_client):
    """DynamoDBUserStore whose table and client are mocks."""
    store = DynamoDBUserStore(test_settings)

    @asynccontextmanager
    async def fake_get_table():
        yield mock_table

    @asynccontextmanager
    async def fake_get_client():
        yield mock_client

    store._get_table = fake_get_table
    store._get_client = fake_get_client
    return store


def transact_items(mock_client):
    return mock_client.transact_write_items.call_args.kwargs['TransactItems']


def test_item_conversion(sample_user):
    """Test items read back from DynamoDB (Binary hash) rebuild the user."""
    item = user_to_item(sample_user)
    assert item['password_hash'] == sample_user.password_hash
    assert item['created_at'] == sample_user.created_at.isoformat()

    item['password_hash'] = Binary(item['password_hash'])
    user = item_to_user(item)

    assert user == sample_user


def test_item_defaults_for_missing_flags(sample_user):
    item = user_to_item(sample_user)
    for key in ('admin', 'admin_forced_password_reset', 'enabled'):
        del item[key]

    user = item_to_user(item)

    assert user.admin is False
    assert user.admin_forced_password_reset is False
    assert user.enabled is True


def test_settings_applied(test_settings):
    store = DynamoDBUserStore(test_settings)

    assert store.table_name == test_settings.USERS_TABLE_NAME
    assert store.endpoint == test_settings.DYNAMODB_ENDPOINT


@pytest.mark.asyncio
async def test_create_user_claims_username_in_same_transaction(store, mock_client, sample_user):
    result = await store.create_user(sample_user)

    assert result is sample_user
    mock_client.transact_write_items.assert_called_once()
    marker, user_put = transact_items(mock_client)

    assert marker['Put']['Item'] == {
        'user_id': {'S': 'username#testuser'},
        'owner_user_id': {'S': 'user_test123'}
    }
    assert marker['Put']['ConditionExpression'] == 'attribute_not_exists(user_id)'
    assert user_put['Put']['Item']['user_id'] == {'S': 'user_test123'}
    assert user_put['Put']['Item']['password_hash'] == {'B': sample_user.password_hash}
    assert user_put['Put']['ConditionExpression'] == 'attribute_not_exists(user_id)'


@pytest.mark.asyncio
async def test_create_user_username_marker_taken(store, mock_client, sample_user):
    """Test a concurrent create that already claimed the username is a duplicate."""
    mock_client.transact_write_items.side_effect = transaction_cancelled('ConditionalCheckFailed', 'None')

    with pytest.raises(StoreError, match="testuser") as exc_info:
        await store.create_user(sample_user)

    assert exc_info.value.duplicate is True


@pytest.mark.asyncio
async def test_create_user_duplicate_id(store, mock_client, sample_user):
    mock_client.transact_write_items.side_effect = transaction_cancelled('None', 'ConditionalCheckFailed')

    with pytest.raises(StoreError, match="user_test123") as exc_info:
        await store.create_user(sample_user)

    assert exc_info.value.duplicate is True


@pytest.mark.asyncio
async def test_create_user_client_error(store, mock_client, sample_user):
    mock_client.transact_write_items.side_effect = client_error(
        'ProvisionedThroughputExceededException', 'TransactWriteItems'
    )

    with pytest.raises(StoreError) as exc_info:
        await store.create_user(sample_user)

    assert exc_info.value.duplicate is False


@pytest.mark.asyncio
async def test_get_user_by_id(store, mock_table, sample_user):
    mock_table.get_item.return_value = {'Item': user_to_item(sample_user)}

    user = await store.get_user_by_id('user_test123')

    assert user == sample_user
    mock_table.get_item.assert_called_once_with(Key={'user_id': 'user_test123'}, ConsistentRead=True)


@pytest.mark.asyncio
async def test_get_user_by_id_missing(store, mock_table):
    mock_table.get_item.return_value = {}

    with pytest.raises(NotFoundError):
        await store.get_user_by_id('user_missing')


@pytest.mark.asyncio
async def test_get_user_by_id_never_returns_username_marker(store, mock_table):
    with pytest.raises(NotFoundError):
        await store.get_user_by_id('username#testuser')

    mock_table.get_item.assert_not_called()


@pytest.mark.asyncio
async def test_save_user(store, mock_client, sample_user):
    await store.save_user(sample_user)

    marker, user_put = transact_items(mock_client)
    assert marker['Put']['ConditionExpression'] == 'attribute_not_exists(user_id) OR owner_user_id = :owner'
    assert marker['Put']['ExpressionAttributeValues'] == {':owner': {'S': 'user_test123'}}
    assert 'ConditionExpression' not in user_put['Put']
    assert user_put['Put']['Item']['admin'] == {'BOOL': False}


@pytest.mark.asyncio
async def test_save_user_username_owned_by_other(store, mock_client, sample_user):
    mock_client.transact_write_items.side_effect = transaction_cancelled('ConditionalCheckFailed', 'None')

    with pytest.raises(StoreError) as exc_info:
        await store.save_user(sample_user)

    assert exc_info.value.duplicate is True
