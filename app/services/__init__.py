"""
Ticketing services and their wiring.

build_services() runs once per application in create_app(); everything it
reads from the configuration is fixed for the life of the process.
"""
from dataclasses import dataclass

from flask import current_app

from app.constants import MintMode
from .chain_client import ChainClient
from .signing import CredentialSigner
from .wallet_service import WalletProvisioner, load_master_key
from .mint_service import MintService
from .redemption_service import RedemptionService


@dataclass(frozen=True)
class TicketingServices:
    chain: object
    signer: CredentialSigner
    wallets: WalletProvisioner
    mints: MintService
    redemptions: RedemptionService


def build_services(config, chain=None, resolvers=None):
    """Wires the services from configuration. `chain` overrides the web3 client."""
    mode = MintMode.from_config(config)
    chain = chain or ChainClient.from_config(config)
    signer = CredentialSigner(config.get('SIGNER_SECRET_KEY'))
    wallets = WalletProvisioner(load_master_key(config.get('WALLET_KEY_ENCRYPTION_KEY')))
    mints = MintService(
        chain=chain,
        wallets=wallets,
        mode=mode,
        metadata_base_url=config['METADATA_BASE_URL'],
        confirmation_timeout=config.get('MINT_CONFIRMATION_TIMEOUT', 120),
        resolvers=resolvers
    )
    return TicketingServices(
        chain=chain,
        signer=signer,
        wallets=wallets,
        mints=mints,
        redemptions=RedemptionService(chain, signer)
    )


def get_services():
    return current_app.extensions['ticketing']
