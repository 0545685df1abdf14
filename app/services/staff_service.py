from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app import db, bcrypt
from app.models import Event, EventStaff
from app.errors import NotFoundError, StorageError, ValidationError


class StaffService:
    @staticmethod
    def create_staff(event_id, email, password):
        """
        Creates a scanner account for one event. Hosts create these; staff
        never self-register.
        """
        email = (email or '').strip().lower()
        if not event_id or not email or not password:
            raise ValidationError("Missing required fields: eventId, email, password")
        if len(email) > 120 or len(password) > 128:
            raise ValidationError("Input too long.")
        if db.session.get(Event, event_id) is None:
            raise NotFoundError(f"Unknown event {event_id}")

        staff = EventStaff(
            event_id=event_id,
            email=email,
            password_hash=bcrypt.generate_password_hash(password).decode('utf-8')
        )
        try:
            db.session.add(staff)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ValidationError(f"Staff {email} already exists for this event")
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Database error: {e}") from e

        current_app.logger.info(f"Staff created: {email} for event {event_id}")
        return staff

    @staticmethod
    def login(email, password, event_id):
        """Returns the EventStaff for valid credentials on that event, else None."""
        email = (email or '').strip().lower()
        if not email or not password or not event_id:
            raise ValidationError("Missing credentials")

        try:
            staff = EventStaff.query.filter_by(email=email, event_id=event_id).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(f"Could not load staff account: {e}") from e

        if staff and bcrypt.check_password_hash(staff.password_hash, password):
            return staff
        return None
