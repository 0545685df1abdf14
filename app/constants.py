from enum import Enum

from .errors import ConfigurationError


ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'

# keccak256("Transfer(address,address,uint256)")
TRANSFER_EVENT_TOPIC = '0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef'

# ERC-721 subset the ticket contract exposes
TICKET_CONTRACT_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "string", "name": "uri", "type": "string"}
        ],
        "name": "safeMint",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "ownerOf",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "from", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "to", "type": "address"},
            {"indexed": True, "internalType": "uint256", "name": "tokenId", "type": "uint256"}
        ],
        "name": "Transfer",
        "type": "event"
    }
]

# Simulated token ids: [OFFSET, OFFSET + RANGE), above any real chain counter, below 2**53
SIMULATED_TOKEN_ID_OFFSET = 2 ** 52
SIMULATED_TOKEN_ID_RANGE = 1_000_000


class MintMode(str, Enum):
    LIVE = 'live'
    SIMULATED = 'simulated'

    @classmethod
    def from_config(cls, config):
        """
        Picks the mint mode once at startup.

        An explicit MINT_MODE wins; otherwise the presence of a platform key
        decides. Simulated minting is never allowed while a key is configured.
        """
        has_key = bool(config.get('PLATFORM_PRIVATE_KEY'))
        requested = config.get('MINT_MODE')

        if not requested:
            return cls.LIVE if has_key else cls.SIMULATED

        try:
            mode = cls(requested.lower())
        except ValueError:
            raise ConfigurationError(f"Unknown MINT_MODE '{requested}'")

        if mode is cls.SIMULATED and has_key:
            raise ConfigurationError("MINT_MODE=simulated is not allowed while PLATFORM_PRIVATE_KEY is set")
        if mode is cls.LIVE and not has_key:
            raise ConfigurationError("MINT_MODE=live requires PLATFORM_PRIVATE_KEY")
        return mode


class MintJobStatus:
    PENDING = 'pending'
    SUBMITTED = 'submitted'
    COMPLETED = 'completed'
    FAILED = 'failed'


class RejectionReason:
    FORGED = 'forged'
    UNKNOWN = 'unknown'
    WRONG_EVENT = 'wrong-event'
    ALREADY_USED = 'already-used'
    OWNERSHIP_MISMATCH = 'ownership-mismatch'
    CHAIN_UNAVAILABLE = 'chain-unavailable'


REJECTION_MESSAGES = {
    RejectionReason.FORGED: 'Invalid signature - Ticket is forged',
    RejectionReason.UNKNOWN: 'Ticket not found in database',
    RejectionReason.WRONG_EVENT: 'Ticket is for a different event',
    RejectionReason.ALREADY_USED: 'Ticket already used',
    RejectionReason.OWNERSHIP_MISMATCH: 'Blockchain verification failed - Token ownership mismatch',
    RejectionReason.CHAIN_UNAVAILABLE: 'Blockchain verification failed - Unable to verify token ownership',
}
