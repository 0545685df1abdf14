"""Account model: an end user and their custodial wallet."""
from datetime import datetime, timezone
from .base import db


class Account(db.Model):
    __tablename__ = 'accounts'

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(120), nullable=True)
    # Assigned once by the wallet provisioner, never changed afterwards
    wallet_address = db.Column(db.String(42), unique=True, nullable=True)
    encrypted_private_key = db.Column(db.Text, nullable=True)
    encrypted_data_key = db.Column(db.Text, nullable=True)
    wallet_created_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    tickets = db.relationship('Ticket', back_populates='owner', lazy='dynamic')

    @property
    def has_custody_key(self):
        return bool(self.encrypted_private_key and self.encrypted_data_key)

    def __repr__(self):
        return f'<Account {self.id} {self.wallet_address}>'
