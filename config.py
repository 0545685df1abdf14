import os
from datetime import timedelta
from dotenv import load_dotenv

# Load environment variables from .env file
BASE_DIR = os.path.abspath(os.path.dirname(__file__))
dotenv_path = os.path.join(BASE_DIR, '.env')

# Load the .env file from that specific path
load_dotenv(dotenv_path=dotenv_path)


class Config:
    """Base configuration class."""

    # Get secret key and database URL from environment variables
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-fallback-secret-key-change-in-prod'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'gatepass.db')

    # Flask-SQLAlchemy settings
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_recycle': 280}
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session settings (staff scanner sessions)
    PERMANENT_SESSION_LIFETIME = timedelta(hours=12)
    SESSION_PROTECTION = 'basic'

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Chain settings
    CHAIN_RPC_URL = os.getenv('CHAIN_RPC_URL', 'https://rpc.nexus.xyz')
    TICKET_CONTRACT_ADDRESS = os.getenv(
        'TICKET_CONTRACT_ADDRESS', '0x80948605d70Ffe40786AafC68c24bfd1a786B59D'
    )
    CHAIN_ID = int(os.getenv('CHAIN_ID')) if os.getenv('CHAIN_ID') else None
    CHAIN_REQUEST_TIMEOUT = int(os.getenv('CHAIN_REQUEST_TIMEOUT', 30))

    # Minting account. Absent key means simulated (demo) minting unless MINT_MODE says otherwise.
    PLATFORM_PRIVATE_KEY = os.getenv('PLATFORM_PRIVATE_KEY')
    MINT_MODE = os.getenv('MINT_MODE')
    MINT_CONFIRMATION_TIMEOUT = int(os.getenv('MINT_CONFIRMATION_TIMEOUT', 120))
    METADATA_BASE_URL = os.getenv('METADATA_BASE_URL', 'https://api.eventpravesh.com/nft')

    # Credential (QR) signing key
    SIGNER_SECRET_KEY = os.getenv('SIGNER_SECRET_KEY')

    # Base64 encoded AES key wrapping custodial wallet keys
    WALLET_KEY_ENCRYPTION_KEY = os.getenv('WALLET_KEY_ENCRYPTION_KEY')

    # Bearer token event hosts use to create staff over HTTP; unset closes that route
    HOST_API_TOKEN = os.getenv('HOST_API_TOKEN')
