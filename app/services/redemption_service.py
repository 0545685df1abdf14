"""Gate-side redemption of signed ticket credentials."""
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import update
from sqlalchemy.orm import joinedload
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import Ticket
from app.constants import RejectionReason, REJECTION_MESSAGES
from app.errors import ChainError, StorageError


@dataclass(frozen=True)
class RedemptionOutcome:
    accepted: bool
    reason: str | None
    message: str

    @classmethod
    def reject(cls, reason):
        return cls(accepted=False, reason=reason, message=REJECTION_MESSAGES[reason])

    def to_dict(self):
        return {'success': self.accepted, 'message': self.message}


class RedemptionService:
    """
    UNSEEN -> REDEEMED, nothing else.

    Checks run in a fixed order and stop at the first failure. Rejections
    never write. The final commit is a conditional update, so of two
    concurrent scans of one ticket exactly one is accepted.
    """

    def __init__(self, chain, signer):
        self.chain = chain
        self.signer = signer

    def redeem(self, credential, staff_event_id):
        payload = credential.payload
        token_id = payload['tokenId']

        # 1. Signature integrity
        if not self.signer.verify(payload, credential.signature):
            return self._rejected(RejectionReason.FORGED, token_id)

        # 2. Ticket existence
        try:
            ticket = (
                Ticket.query.options(joinedload(Ticket.event))
                .filter_by(token_id=token_id)
                .first()
            )
            if ticket is not None:
                ticket_id, ticket_event_id, consumed = ticket.id, ticket.event_id, ticket.consumed
                event_title = ticket.event.title if ticket.event else ticket.event_id
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not look up ticket {token_id}: {e}") from e
        if ticket is None:
            return self._rejected(RejectionReason.UNKNOWN, token_id)

        # 3. Event binding
        if str(ticket_event_id) != str(staff_event_id):
            return self._rejected(RejectionReason.WRONG_EVENT, token_id)

        # 4. Single use (re-checked atomically by the commit below)
        if consumed:
            return self._rejected(RejectionReason.ALREADY_USED, token_id)

        # 5. On-chain owner must match the owner inside the signed payload
        try:
            chain_owner = self.chain.owner_of(token_id)
        except ChainError as e:
            current_app.logger.error(f"Blockchain verification error for token {token_id}: {e}")
            return self._rejected(RejectionReason.CHAIN_UNAVAILABLE, token_id)
        if not chain_owner or chain_owner.lower() != payload['owner'].lower():
            return self._rejected(RejectionReason.OWNERSHIP_MISMATCH, token_id)

        # 6. Commit
        try:
            result = db.session.execute(
                update(Ticket)
                .where(Ticket.id == ticket_id, Ticket.consumed.is_(False))
                .values(consumed=True, consumed_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not mark ticket {ticket_id} used: {e}") from e

        if result.rowcount != 1:
            return self._rejected(RejectionReason.ALREADY_USED, token_id)

        db.session.expire(ticket)
        current_app.logger.info(f"Ticket {ticket_id} (token {token_id}) redeemed for event {staff_event_id}")
        return RedemptionOutcome(accepted=True, reason=None, message=f"Valid ticket for {event_title}")

    def _rejected(self, reason, token_id):
        current_app.logger.warning(f"Redemption rejected for token {token_id}: {reason}")
        return RedemptionOutcome.reject(reason)
