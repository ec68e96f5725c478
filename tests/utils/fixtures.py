import os
from decimal import Decimal
from uuid import uuid4

import pytest
from chalice.test import Client

from app import app, configure_context
from chalicelib.context import AppContext
from chalicelib.menu_items import MenuItem
from chalicelib.utils.auth import create_access_token
from chalicelib.utils.db import Database
from chalicelib.utils.notifications import EmailNotifier
from tests.utils.fake_table import FakeTable

TEST_ADMIN_USERNAME = 'admin'
TEST_ADMIN_PASSWORD = 'test-password'
TEST_JWT_SECRET = 'test-secret'
ORDER_EMAIL_FROM = 'orders@cafe.test'
CAFE_EMAIL = 'hello@cafe.test'

local_db_test = pytest.mark.skipif(
    not os.environ.get('ENDPOINT_URL'),
    reason='ENDPOINT_URL is not set, DynamoDB Local is not available'
)


class FakeSesClient:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_email(self, **kwargs):
        if self.fail:
            raise ConnectionError('SES is unreachable')
        self.sent.append(kwargs)
        return {'MessageId': f'message-{len(self.sent)}'}


def create_test_menu_item(db: Database, **overrides) -> MenuItem:
    attributes = {
        'name': 'CAPPUCCINO',
        'description': 'Rich espresso with steamed milk and velvety foam',
        'price': Decimal('80'),
        'category': 'coffee',
        'image': 'https://images.test/cappuccino.jpeg',
        'rating': Decimal('4.6'),
        **overrides
    }
    menu_item = MenuItem(db, attributes.pop('id_', None) or str(uuid4()), **attributes)
    menu_item.create()
    return menu_item


@pytest.fixture
def admin_env(monkeypatch):
    monkeypatch.setenv('ADMIN_USERNAME', TEST_ADMIN_USERNAME)
    monkeypatch.setenv('ADMIN_PASSWORD', TEST_ADMIN_PASSWORD)
    monkeypatch.setenv('JWT_SECRET_KEY', TEST_JWT_SECRET)
    monkeypatch.setenv('APP_ENV', 'test')


@pytest.fixture
def fake_table() -> FakeTable:
    return FakeTable()


@pytest.fixture
def db(fake_table) -> Database:
    return Database(fake_table)


@pytest.fixture
def ses_client() -> FakeSesClient:
    return FakeSesClient()


@pytest.fixture
def app_context(db, ses_client) -> AppContext:
    return AppContext(db, EmailNotifier(ses_client, ORDER_EMAIL_FROM, CAFE_EMAIL))


@pytest.fixture
def chalice_client(app_context, admin_env):
    configure_context(app_context)
    with Client(app, stage_name='test') as client:
        yield client
    configure_context(None)


@pytest.fixture
def admin_token(admin_env) -> str:
    return create_access_token(TEST_ADMIN_USERNAME)['token']
