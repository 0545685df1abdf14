"""Event staff accounts. Each login is valid for exactly one event."""
from datetime import datetime, timezone
from flask_login import UserMixin
from .base import db


class EventStaff(UserMixin, db.Model):
    __tablename__ = 'event_staff'
    __table_args__ = (
        db.UniqueConstraint('email', 'event_id', name='uq_event_staff_email_event_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.String(64), db.ForeignKey('events.id'), nullable=False, index=True)
    email = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    event = db.relationship('Event', back_populates='staff')

    def __repr__(self):
        return f'<EventStaff {self.email} event={self.event_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'eventId': self.event_id
        }
