"""Error taxonomy for ticket issuance and redemption, plus the JSON error handlers."""
from flask import jsonify, current_app


class TicketingError(Exception):
    """Base class for errors raised by the ticketing services."""
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ValidationError(TicketingError):
    """Missing or malformed input."""
    status_code = 400


class NotFoundError(ValidationError):
    """Requested record does not exist."""
    status_code = 404


class ConfigurationError(TicketingError):
    """The service is missing required configuration."""
    status_code = 500


class StorageError(TicketingError):
    """The ticket store is unavailable."""
    status_code = 503


class ChainError(TicketingError):
    """A call to the ledger failed."""
    status_code = 502


class ChainTimeoutError(ChainError):
    """Timed out waiting on the ledger."""


class MintTransactionError(TicketingError):
    """The mint transaction could not be submitted or confirmed."""
    status_code = 502

    def __init__(self, message=None, tx_hash=None):
        super().__init__(message)
        self.tx_hash = tx_hash


class TokenIdUnresolvedError(TicketingError):
    """Could not determine the token id of a minted ticket."""
    status_code = 502

    def __init__(self, message=None, tx_hash=None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ReconciliationError(TicketingError):
    """A mint succeeded on chain but the ticket could not be stored."""
    status_code = 500

    def __init__(self, message=None, tx_hash=None, token_id=None):
        super().__init__(message)
        self.tx_hash = tx_hash
        self.token_id = token_id


def register_error_handlers(app):
    @app.errorhandler(TicketingError)
    def handle_ticketing_error(err):
        if err.status_code >= 500:
            current_app.logger.error(f"{err.__class__.__name__}: {err.message}")
        return jsonify({'error': err.message}), err.status_code
