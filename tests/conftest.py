"""
Pytest configuration and fixtures.
"""
import sys
import os
import tempfile
from collections import Counter

import pytest

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__) + '/..'))

from config import Config
from app.constants import TRANSFER_EVENT_TOPIC, ZERO_ADDRESS
from app.errors import ChainError, ChainTimeoutError

# Well-known throwaway key, never funded
TEST_PLATFORM_KEY = '0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318'
TEST_SIGNER_KEY = 'test-signer-secret'
# base64 of 32 bytes
TEST_WALLET_KEK = 'MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY='


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SERVER_NAME = 'localhost.localdomain'
    SIGNER_SECRET_KEY = TEST_SIGNER_KEY
    PLATFORM_PRIVATE_KEY = None
    MINT_MODE = None
    WALLET_KEY_ENCRYPTION_KEY = TEST_WALLET_KEK
    MINT_CONFIRMATION_TIMEOUT = 5
    METADATA_BASE_URL = 'https://metadata.test/nft'
    BCRYPT_LOG_ROUNDS = 4
    HOST_API_TOKEN = 'test-host-token'


class LiveTestConfig(TestConfig):
    PLATFORM_PRIVATE_KEY = TEST_PLATFORM_KEY


def _address_topic(address):
    return '0x' + '0' * 24 + address[2:].lower()


class FakeChain:
    """
    In-memory stand-in for ChainClient.

    Token ids are handed out sequentially starting at `next_token_id`.
    `log_style` controls what the receipts carry:
      'event' - a Transfer log that also decodes as a typed event
      'topic' - the raw Transfer log only (typed decoding finds nothing)
      'none'  - no logs at all
    """

    def __init__(self, next_token_id=7, log_style='event'):
        self.calls = Counter()
        self.owners = {}
        self.receipts = {}
        self.next_token_id = next_token_id
        self.log_style = log_style
        self.supply_override = None
        self.fail_submit = False
        self.timeout_wait = False
        self.revert = False
        self.owner_of_error = None
        self.on_owner_of = None

    def submit_mint(self, to_address, metadata_uri):
        self.calls['submit_mint'] += 1
        if self.fail_submit:
            raise ChainError("nonce too low")

        token_id = self.next_token_id
        self.next_token_id += 1
        self.owners[token_id] = to_address
        tx_hash = '0x' + format(len(self.receipts) + 1, '064x')
        self.receipts[tx_hash] = self._receipt(tx_hash, to_address, token_id)
        return tx_hash

    def _receipt(self, tx_hash, to_address, token_id):
        logs = []
        if self.log_style in ('event', 'topic'):
            logs.append({
                'topics': [
                    TRANSFER_EVENT_TOPIC,
                    _address_topic(ZERO_ADDRESS),
                    _address_topic(to_address),
                    '0x' + format(token_id, '064x'),
                ],
                'data': '0x',
            })
        return {
            'transactionHash': tx_hash,
            'status': 0 if self.revert else 1,
            'logs': logs,
            '_decoded': [{'from': ZERO_ADDRESS, 'to': to_address, 'tokenId': token_id}]
            if self.log_style == 'event' else [],
        }

    def wait_for_receipt(self, tx_hash, timeout):
        self.calls['wait_for_receipt'] += 1
        if self.timeout_wait:
            raise ChainTimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")
        return self.receipts[tx_hash]

    def get_receipt(self, tx_hash):
        self.calls['get_receipt'] += 1
        return self.receipts.get(tx_hash)

    def decode_transfer_events(self, receipt):
        self.calls['decode_transfer_events'] += 1
        return list(receipt.get('_decoded', []))

    def total_supply(self):
        self.calls['total_supply'] += 1
        if self.supply_override is not None:
            return self.supply_override
        return max(self.owners) + 1 if self.owners else 0

    def owner_of(self, token_id):
        self.calls['owner_of'] += 1
        if self.on_owner_of:
            hook, self.on_owner_of = self.on_owner_of, None
            hook(token_id)
        if self.owner_of_error:
            raise self.owner_of_error
        if token_id not in self.owners:
            raise ChainError(f"ownerOf({token_id}) failed: ERC721NonexistentToken")
        return self.owners[token_id]


def seed_event_and_account(event_id='E1', title='Summer Fest', user_id='U1'):
    from app import db
    from app.models import Account, Event

    db.session.add(Event(id=event_id, title=title))
    db.session.add(Account(id=user_id, email=f'{user_id.lower()}@example.com'))
    db.session.commit()


def _make_app(config_class, chain):
    from app import create_app, db
    from app.services import build_services

    app = create_app(config_class)
    app.extensions['ticketing'] = build_services(app.config, chain=chain)
    with app.app_context():
        db.create_all()
    return app


@pytest.fixture(scope='function')
def fake_chain():
    return FakeChain()


@pytest.fixture(scope='function')
def app(fake_chain):
    """Live-mode application wired to the in-memory chain."""
    db_fd, db_path = tempfile.mkstemp()

    class FileConfig(LiveTestConfig):
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_path}'

    app = _make_app(FileConfig, fake_chain)
    yield app

    with app.app_context():
        from app import db
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture(scope='function')
def simulated_app(fake_chain):
    """Demo-mode application: no platform key, nothing is sent to the chain."""
    app = _make_app(TestConfig, fake_chain)
    yield app

    with app.app_context():
        from app import db
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def seeded(app):
    """Event E1 'Summer Fest' and account U1."""
    with app.app_context():
        seed_event_and_account()
    return app


@pytest.fixture(scope='function')
def simulated_seeded(simulated_app):
    with simulated_app.app_context():
        seed_event_and_account()
    return simulated_app
