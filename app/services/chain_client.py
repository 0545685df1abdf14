"""Thin web3 adapter over the ticket contract."""
import requests
from web3 import Web3
from web3.exceptions import TimeExhausted, TransactionNotFound, Web3Exception
from web3.logs import DISCARD

from ..constants import TICKET_CONTRACT_ABI
from ..errors import ChainError, ChainTimeoutError, ConfigurationError

# Anything the provider or node can throw at us on a remote call
_REMOTE_ERRORS = (Web3Exception, requests.RequestException, ValueError, ConnectionError)


class ChainClient:
    """
    Issues mint transactions and read-only ownership/supply queries.

    Every remote failure is re-raised as ChainError (ChainTimeoutError for an
    expired confirmation wait) so callers never depend on web3 exception types.
    """

    def __init__(self, rpc_url, contract_address, private_key=None, chain_id=None,
                 request_timeout=30, web3=None):
        self.w3 = web3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': request_timeout}))
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=TICKET_CONTRACT_ABI
        )
        self.chain_id = chain_id
        self._account = self.w3.eth.account.from_key(private_key) if private_key else None

    @classmethod
    def from_config(cls, config):
        return cls(
            rpc_url=config['CHAIN_RPC_URL'],
            contract_address=config['TICKET_CONTRACT_ADDRESS'],
            private_key=config.get('PLATFORM_PRIVATE_KEY'),
            chain_id=config.get('CHAIN_ID'),
            request_timeout=config.get('CHAIN_REQUEST_TIMEOUT', 30)
        )

    @property
    def platform_address(self):
        return self._account.address if self._account else None

    def submit_mint(self, to_address, metadata_uri):
        """Signs and broadcasts safeMint(to, uri). Returns the 0x tx hash."""
        if self._account is None:
            raise ConfigurationError("No platform key configured for minting")

        try:
            chain_id = self.chain_id or self.w3.eth.chain_id
            nonce = self.w3.eth.get_transaction_count(self._account.address, 'pending')
            transaction = self.contract.functions.safeMint(
                Web3.to_checksum_address(to_address), metadata_uri
            ).build_transaction({
                'chainId': chain_id,
                'from': self._account.address,
                'nonce': nonce,
            })
            signed_txn = self._account.sign_transaction(transaction)
            tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        except _REMOTE_ERRORS as e:
            raise ChainError(f"Mint submission failed: {e}") from e

        return self.w3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash, timeout):
        try:
            return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as e:
            raise ChainTimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s") from e
        except _REMOTE_ERRORS as e:
            raise ChainError(f"Waiting for {tx_hash} failed: {e}") from e

    def get_receipt(self, tx_hash):
        """Receipt of an already broadcast transaction, or None while it is still pending."""
        try:
            return self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except _REMOTE_ERRORS as e:
            raise ChainError(f"Fetching receipt for {tx_hash} failed: {e}") from e

    def decode_transfer_events(self, receipt):
        """Typed Transfer events in the receipt as plain dicts; logs that don't decode are skipped."""
        events = self.contract.events.Transfer().process_receipt(receipt, errors=DISCARD)
        return [
            {
                'from': event['args']['from'],
                'to': event['args']['to'],
                'tokenId': int(event['args']['tokenId'])
            }
            for event in events
        ]

    def owner_of(self, token_id):
        try:
            return self.contract.functions.ownerOf(int(token_id)).call()
        except _REMOTE_ERRORS as e:
            raise ChainError(f"ownerOf({token_id}) failed: {e}") from e

    def total_supply(self):
        try:
            return int(self.contract.functions.totalSupply().call())
        except _REMOTE_ERRORS as e:
            raise ChainError(f"totalSupply() failed: {e}") from e
