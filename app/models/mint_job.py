"""Durable record of a live mint, written before the transaction is submitted."""
from datetime import datetime, timezone
from .base import db
from ..constants import MintJobStatus


class MintJob(db.Model):
    __tablename__ = 'mint_jobs'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.String(64), db.ForeignKey('events.id'), nullable=False)
    user_id = db.Column(db.String(64), db.ForeignKey('accounts.id'), nullable=False)
    owner_address = db.Column(db.String(42), nullable=False)
    metadata_uri = db.Column(db.String(255), nullable=False)
    tx_hash = db.Column(db.String(66), nullable=True, index=True)
    status = db.Column(db.String(20), nullable=False, default=MintJobStatus.PENDING, index=True)
    ticket_id = db.Column(db.Integer, db.ForeignKey('tickets.id'), nullable=True)
    error = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    ticket = db.relationship('Ticket')

    def __repr__(self):
        return f'<MintJob {self.id} {self.status} tx={self.tx_hash}>'
