"""
Token id resolution for a confirmed mint.

Resolvers are tried in order. Each returns the token id, or None to hand
over to the next one. A resolver may also raise TokenIdUnresolvedError to
stop the chain outright when the evidence contradicts the mint.
"""
from ..constants import TRANSFER_EVENT_TOPIC, ZERO_ADDRESS
from ..errors import ChainError, TokenIdUnresolvedError


def _hex(value):
    if isinstance(value, str):
        value = value.lower()
        return value if value.startswith('0x') else '0x' + value
    return '0x' + bytes(value).hex()


def _same_address(a, b):
    return bool(a) and bool(b) and a.lower() == b.lower()


class TransferEventResolver:
    """Decoded Transfer(from=0x0) events in the receipt."""
    name = 'transfer-event'

    def __init__(self, chain):
        self.chain = chain

    def resolve(self, receipt, owner):
        for event in self.chain.decode_transfer_events(receipt):
            if _same_address(event['from'], ZERO_ADDRESS):
                return int(event['tokenId'])
        return None


class TransferTopicResolver:
    """Raw log topics: Transfer topic hash with the token id in the fourth slot."""
    name = 'transfer-topic'

    def resolve(self, receipt, owner):
        for log in receipt.get('logs') or []:
            topics = log.get('topics') or []
            if len(topics) < 4:
                continue
            if _hex(topics[0]) != TRANSFER_EVENT_TOPIC:
                continue
            return int(_hex(topics[3]), 16)
        return None


class SupplyCounterResolver:
    """totalSupply() - 1, accepted only if ownerOf() confirms the intended owner."""
    name = 'supply-counter'

    def __init__(self, chain):
        self.chain = chain

    def resolve(self, receipt, owner):
        try:
            supply = self.chain.total_supply()
            if supply < 1:
                return None
            candidate = supply - 1
            actual_owner = self.chain.owner_of(candidate)
        except ChainError as e:
            raise TokenIdUnresolvedError(f"Failed to determine token ID from blockchain: {e}") from e

        if not _same_address(actual_owner, owner):
            raise TokenIdUnresolvedError(
                f"Token {candidate} ownership mismatch: expected {owner}, got {actual_owner}"
            )
        return candidate


def default_resolvers(chain):
    return [
        TransferEventResolver(chain),
        TransferTopicResolver(),
        SupplyCounterResolver(chain),
    ]


def resolve_token_id(receipt, owner, resolvers, logger=None):
    """Walks `resolvers` in order and returns the first token id found."""
    for resolver in resolvers:
        token_id = resolver.resolve(receipt, owner)
        if token_id is not None:
            if logger:
                logger.info(f"Resolved token ID {token_id} via {getattr(resolver, 'name', resolver)}")
            return token_id
        if logger:
            logger.info(f"Resolver {getattr(resolver, 'name', resolver)} found no token ID")

    raise TokenIdUnresolvedError("Token ID could not be determined from the mint receipt")
