"""Ticket model: one issued admission ticket."""
from datetime import datetime, timezone
from .base import db


class Ticket(db.Model):
    __tablename__ = 'tickets'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.String(64), db.ForeignKey('events.id'), nullable=False, index=True)
    owner_user_id = db.Column(db.String(64), db.ForeignKey('accounts.id'), nullable=False, index=True)
    token_id = db.Column(db.BigInteger, unique=True, nullable=True)
    owner_address = db.Column(db.String(42), nullable=False)
    mint_tx_hash = db.Column(db.String(66), nullable=True)
    # Flipped false -> true exactly once, by RedemptionService only
    consumed = db.Column(db.Boolean, default=False, nullable=False)
    consumed_at = db.Column(db.DateTime, nullable=True)
    chain_backed = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    event = db.relationship('Event', back_populates='tickets')
    owner = db.relationship('Account', back_populates='tickets')

    def __repr__(self):
        return f'<Ticket {self.id} token={self.token_id} event={self.event_id}>'

    def to_dict(self):
        """Convert ticket to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'eventId': self.event_id,
            'ownerUserId': self.owner_user_id,
            'tokenId': self.token_id,
            'ownerAddress': self.owner_address,
            'transactionHash': self.mint_tx_hash,
            'consumed': self.consumed,
            'chainBacked': self.chain_backed,
            'createdAt': self.created_at.isoformat() if self.created_at else None
        }
