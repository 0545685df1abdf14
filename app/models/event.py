"""Event model. Only the fields ticketing needs; catalog data lives elsewhere."""
from datetime import datetime, timezone
from .base import db


class Event(db.Model):
    __tablename__ = 'events'

    id = db.Column(db.String(64), primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    tickets = db.relationship('Ticket', back_populates='event', lazy='dynamic')
    staff = db.relationship('EventStaff', back_populates='event', lazy='dynamic')

    def __repr__(self):
        return f'<Event {self.id} {self.title}>'
