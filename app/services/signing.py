"""Keyed integrity tags for ticket credentials (the QR payload)."""
import hashlib
import hmac
import json
from dataclasses import dataclass

from ..errors import ConfigurationError, ValidationError


def canonical_payload(payload):
    """Stable serialization of {tokenId, owner}: sorted keys, no whitespace."""
    return json.dumps(
        {'owner': payload['owner'], 'tokenId': payload['tokenId']},
        sort_keys=True,
        separators=(',', ':')
    ).encode('utf-8')


@dataclass(frozen=True)
class Credential:
    payload: dict
    signature: str

    def to_qr_string(self):
        return json.dumps({'payload': self.payload, 'signature': self.signature}, separators=(',', ':'))

    @classmethod
    def from_qr_string(cls, text):
        """Parses a scanned QR string. Raises ValidationError when it isn't a credential."""
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            raise ValidationError("Invalid QR code")

        if not isinstance(data, dict):
            raise ValidationError("Invalid QR code")
        payload = data.get('payload')
        signature = data.get('signature')
        if not isinstance(payload, dict) or not isinstance(signature, str):
            raise ValidationError("Invalid QR code")

        token_id = payload.get('tokenId')
        owner = payload.get('owner')
        if isinstance(token_id, bool) or not isinstance(token_id, int) or not isinstance(owner, str):
            raise ValidationError("Invalid QR code")

        return cls(payload={'tokenId': token_id, 'owner': owner}, signature=signature)


class CredentialSigner:
    """
    HMAC-SHA256 over the canonical payload.

    The key is handed in once at startup and never re-read. A signer built
    without a key refuses to sign or verify.
    """

    def __init__(self, secret_key):
        self._key = secret_key.encode('utf-8') if isinstance(secret_key, str) else secret_key

    @property
    def configured(self):
        return bool(self._key)

    def _tag(self, payload):
        if not self._key:
            raise ConfigurationError("SIGNER_SECRET_KEY not configured")
        return hmac.new(self._key, canonical_payload(payload), hashlib.sha256).hexdigest()

    def sign(self, payload):
        return self._tag(payload)

    def verify(self, payload, signature):
        if not isinstance(signature, str):
            return False
        expected = self._tag(payload)
        return hmac.compare_digest(expected.encode('utf-8'), signature.encode('utf-8'))

    def issue(self, ticket):
        """Builds the credential for a stored ticket. No new state is written."""
        if ticket.token_id is None:
            raise ValidationError("Ticket has no token id")
        payload = {'tokenId': int(ticket.token_id), 'owner': ticket.owner_address}
        return Credential(payload=payload, signature=self.sign(payload))
