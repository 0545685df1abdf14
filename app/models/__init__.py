"""
Models package for GatePass.

The ticket store: accounts, events, tickets, event staff and mint jobs.
"""
from .base import db

from .account import Account
from .event import Event
from .ticket import Ticket
from .event_staff import EventStaff
from .mint_job import MintJob

# Import Flask-Login user loader
from .. import login_manager


@login_manager.user_loader
def load_staff(staff_id):
    return db.session.get(EventStaff, int(staff_id))


__all__ = [
    'db',
    'Account',
    'Event',
    'Ticket',
    'EventStaff',
    'MintJob',
    'load_staff',
]
