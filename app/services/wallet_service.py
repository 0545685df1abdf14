"""Custodial wallet provisioning and key custody."""
import base64
import binascii
import secrets
from datetime import datetime, timezone

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from eth_account import Account as EthAccount
from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import Account
from app.errors import ConfigurationError, NotFoundError, StorageError, ValidationError

_DATA_KEY_AAD = b'gatepass:wallet-data-key:v1'


def _seal(key, plaintext, aad):
    nonce = secrets.token_bytes(12)
    return base64.b64encode(nonce + AESGCM(key).encrypt(nonce, plaintext, aad)).decode('ascii')


def _open(key, blob, aad):
    raw = base64.b64decode(blob)
    if len(raw) < 13:
        raise ValueError("sealed blob too short")
    return AESGCM(key).decrypt(raw[:12], raw[12:], aad)


def load_master_key(encoded):
    """Decodes WALLET_KEY_ENCRYPTION_KEY (base64 AES key). None passes through."""
    if not encoded:
        return None
    try:
        key = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ConfigurationError("WALLET_KEY_ENCRYPTION_KEY must be base64")
    if len(key) not in (16, 24, 32):
        raise ConfigurationError("WALLET_KEY_ENCRYPTION_KEY must decode to 16, 24 or 32 bytes")
    return key


class WalletProvisioner:
    """
    Assigns each account a custodial address, lazily and exactly once.

    With a master key the private key is stored envelope encrypted: a fresh
    data key seals the private key, the master key seals the data key.
    """

    def __init__(self, master_key=None):
        self._master_key = master_key

    @property
    def holds_keys(self):
        return self._master_key is not None

    def ensure_address(self, user_id):
        address, _ = self.create_wallet(user_id)
        return address

    def create_wallet(self, user_id):
        """Returns (address, created). `created` is False when the account already had one."""
        if not user_id:
            raise ValidationError("Missing userId")

        try:
            account = db.session.get(Account, user_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not load account {user_id}: {e}") from e

        if account is None:
            raise NotFoundError(f"Unknown user {user_id}")
        if account.wallet_address:
            return account.wallet_address, False

        # Generate first, then write everything in one conditional update.
        wallet = EthAccount.create()
        values = {
            'wallet_address': wallet.address,
            'wallet_created_at': datetime.now(timezone.utc),
        }
        if self._master_key:
            data_key = AESGCM.generate_key(bit_length=256)
            values['encrypted_private_key'] = _seal(data_key, bytes(wallet.key), wallet.address.encode('ascii'))
            values['encrypted_data_key'] = _seal(self._master_key, data_key, _DATA_KEY_AAD)
        else:
            current_app.logger.warning(
                f"No WALLET_KEY_ENCRYPTION_KEY configured; wallet for {user_id} is assigned without key custody"
            )

        try:
            result = db.session.execute(
                update(Account)
                .where(Account.id == user_id, Account.wallet_address.is_(None))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not store wallet for {user_id}: {e}") from e

        if result.rowcount != 1:
            # A concurrent request assigned the wallet first; theirs stands.
            db.session.expire(account)
            current_app.logger.info(f"Wallet for {user_id} was assigned concurrently")
            return account.wallet_address, False

        db.session.expire(account)
        current_app.logger.info(f"Generated wallet for user {user_id}: {wallet.address}")
        return wallet.address, True

    def load_private_key(self, user_id):
        """Decrypts the custodial key for an account. Returns a 0x hex string."""
        if not self._master_key:
            raise ConfigurationError("Key custody is not configured")

        account = db.session.get(Account, user_id)
        if account is None:
            raise NotFoundError(f"Unknown user {user_id}")
        if not account.has_custody_key:
            raise NotFoundError(f"No custodial key stored for user {user_id}")

        try:
            data_key = _open(self._master_key, account.encrypted_data_key, _DATA_KEY_AAD)
            private_key = _open(data_key, account.encrypted_private_key, account.wallet_address.encode('ascii'))
        except (InvalidTag, ValueError, binascii.Error) as e:
            raise ConfigurationError(f"Custodial key for {user_id} could not be decrypted") from e

        return '0x' + private_key.hex()
