"""Ticket issuance: wallet, mint, token id resolution, persistence."""
import secrets

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import Event, Ticket, MintJob
from app.constants import MintMode, MintJobStatus, SIMULATED_TOKEN_ID_OFFSET, SIMULATED_TOKEN_ID_RANGE
from app.errors import (
    ChainError,
    ChainTimeoutError,
    MintTransactionError,
    NotFoundError,
    ReconciliationError,
    StorageError,
    TokenIdUnresolvedError,
    ValidationError,
)
from .token_resolution import default_resolvers, resolve_token_id


class MintService:
    """
    Issues tickets in the mode fixed at startup.

    Live minting writes a MintJob before touching the chain and records the
    transaction hash as soon as it exists, so a mint whose caller went away
    can still be completed by `reconcile_pending`.
    """

    def __init__(self, chain, wallets, mode, metadata_base_url, confirmation_timeout=120, resolvers=None):
        self.chain = chain
        self.wallets = wallets
        self.mode = MintMode(mode)
        self.metadata_base_url = metadata_base_url.rstrip('/')
        self.confirmation_timeout = confirmation_timeout
        self.resolvers = resolvers if resolvers is not None else default_resolvers(chain)

    def metadata_uri(self, event_id, user_id):
        return f"{self.metadata_base_url}/{event_id}/{user_id}"

    def issue_ticket(self, event_id, user_id):
        if not event_id or not user_id:
            raise ValidationError("Missing eventId or userId")

        self._require_event(event_id)
        owner_address = self.wallets.ensure_address(user_id)

        if self.mode is MintMode.SIMULATED:
            return self._issue_simulated(event_id, user_id, owner_address)
        return self._issue_live(event_id, user_id, owner_address)

    # ------------------------------------------------------------------
    # Simulated (demo) mode
    # ------------------------------------------------------------------

    def _issue_simulated(self, event_id, user_id, owner_address):
        current_app.logger.warning(f"Simulated minting: issuing ticket for event {event_id} without a chain")
        try:
            ticket = Ticket(
                event_id=event_id,
                owner_user_id=user_id,
                token_id=self._unused_simulated_token_id(),
                owner_address=owner_address,
                mint_tx_hash=None,
                consumed=False,
                chain_backed=False
            )
            db.session.add(ticket)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not store ticket: {e}") from e
        return ticket

    def _unused_simulated_token_id(self):
        for _ in range(10):
            candidate = SIMULATED_TOKEN_ID_OFFSET + secrets.randbelow(SIMULATED_TOKEN_ID_RANGE)
            if not Ticket.query.filter_by(token_id=candidate).first():
                return candidate
        raise StorageError("Could not find an unused simulated token id")

    # ------------------------------------------------------------------
    # Live mode
    # ------------------------------------------------------------------

    def _issue_live(self, event_id, user_id, owner_address):
        job = MintJob(
            event_id=event_id,
            user_id=user_id,
            owner_address=owner_address,
            metadata_uri=self.metadata_uri(event_id, user_id),
            status=MintJobStatus.PENDING
        )
        try:
            db.session.add(job)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not record mint job: {e}") from e

        current_app.logger.info(f"Minting NFT to {owner_address} with URI: {job.metadata_uri}")
        try:
            tx_hash = self.chain.submit_mint(owner_address, job.metadata_uri)
        except ChainError as e:
            self._mark_failed(job, str(e))
            raise MintTransactionError(f"Mint submission failed: {e.message}") from e

        current_app.logger.info(f"Transaction sent: {tx_hash}")
        try:
            job.tx_hash = tx_hash
            job.status = MintJobStatus.SUBMITTED
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.critical(
                f"Mint {tx_hash} for user {user_id} event {event_id} submitted but not recorded: {e}"
            )
            raise ReconciliationError(
                f"Mint transaction {tx_hash} was submitted but could not be recorded", tx_hash=tx_hash
            ) from e

        try:
            receipt = self.chain.wait_for_receipt(tx_hash, timeout=self.confirmation_timeout)
        except ChainTimeoutError as e:
            # Outcome unknown; the job stays 'submitted' for the reconciler.
            current_app.logger.error(f"Mint {tx_hash} not confirmed in time: {e}")
            raise MintTransactionError(
                f"Mint transaction {tx_hash} was not confirmed within {self.confirmation_timeout}s",
                tx_hash=tx_hash
            ) from e
        except ChainError as e:
            current_app.logger.error(f"Mint {tx_hash} confirmation failed: {e}")
            raise MintTransactionError(f"Mint confirmation failed: {e.message}", tx_hash=tx_hash) from e

        return self._complete(job, receipt)

    def _complete(self, job, receipt):
        """Resolves the token id from a confirmed receipt and stores the ticket."""
        tx_hash = job.tx_hash
        owner_address, user_id, event_id = job.owner_address, job.user_id, job.event_id
        if receipt.get('status') == 0:
            self._mark_failed(job, "transaction reverted")
            raise MintTransactionError(f"Mint transaction {tx_hash} reverted", tx_hash=tx_hash)

        current_app.logger.info(f"Transaction confirmed: {tx_hash}")
        try:
            token_id = resolve_token_id(receipt, owner_address, self.resolvers, logger=current_app.logger)
        except TokenIdUnresolvedError as e:
            current_app.logger.error(f"Token ID unresolved for {tx_hash}: {e}")
            self._mark_failed(job, e.message)
            e.tx_hash = tx_hash
            raise

        try:
            ticket = Ticket(
                event_id=event_id,
                owner_user_id=user_id,
                token_id=token_id,
                owner_address=owner_address,
                mint_tx_hash=tx_hash,
                consumed=False,
                chain_backed=True
            )
            db.session.add(ticket)
            db.session.flush()
            job.ticket_id = ticket.id
            job.status = MintJobStatus.COMPLETED
            job.error = None
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.critical(
                f"Token {token_id} minted in {tx_hash} to {owner_address} "
                f"(user {user_id}, event {event_id}) but the ticket was not stored: {e}"
            )
            raise ReconciliationError(
                f"Ticket minted on chain (token {token_id}, tx {tx_hash}) but could not be stored",
                tx_hash=tx_hash,
                token_id=token_id
            ) from e

        current_app.logger.info(f"NFT minted successfully: Token ID {token_id}, ticket {ticket.id}")
        return ticket

    def _mark_failed(self, job, reason):
        try:
            job.status = MintJobStatus.FAILED
            job.error = reason
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Could not mark mint job {job.id} failed: {e}")

    def _require_event(self, event_id):
        try:
            event = db.session.get(Event, event_id)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not load event {event_id}: {e}") from e
        if event is None:
            raise NotFoundError(f"Unknown event {event_id}")
        return event

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile_pending(self, limit=None):
        """
        Drives every 'submitted' job to completion from its stored tx hash.

        Returns a dict of counters: completed, pending (receipt not yet
        available or the store write failed; retried next run), failed.
        """
        summary = {'completed': 0, 'pending': 0, 'failed': 0}
        query = MintJob.query.filter_by(status=MintJobStatus.SUBMITTED).order_by(MintJob.id)
        if limit:
            query = query.limit(limit)

        for job in query.all():
            job_id, tx_hash = job.id, job.tx_hash
            try:
                existing = Ticket.query.filter_by(mint_tx_hash=tx_hash).first()
                if existing:
                    job.ticket_id = existing.id
                    job.status = MintJobStatus.COMPLETED
                    db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.error(f"Reconcile: could not update job {job_id} for {tx_hash}: {e}")
                summary['pending'] += 1
                continue
            if existing:
                summary['completed'] += 1
                continue

            try:
                receipt = self.chain.get_receipt(job.tx_hash)
            except ChainError as e:
                current_app.logger.error(f"Reconcile: receipt for {job.tx_hash} unavailable: {e}")
                summary['pending'] += 1
                continue

            if receipt is None:
                summary['pending'] += 1
                continue

            try:
                self._complete(job, receipt)
                summary['completed'] += 1
            except (MintTransactionError, TokenIdUnresolvedError, ReconciliationError) as e:
                current_app.logger.error(f"Reconcile: job {job.id} failed: {e}")
                summary['failed'] += 1

        return summary
