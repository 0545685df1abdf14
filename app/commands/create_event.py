import click
from flask.cli import with_appcontext
from app import db
from app.models import Event


@click.command('create-event')
@click.option('--event-id', required=True, help='The event id tickets and staff are scoped to')
@click.option('--title', required=True, help='Event title shown on successful scans')
@with_appcontext
def create_event(event_id, title):
    """
    Creates the event record ticketing needs.
    """
    existing = db.session.get(Event, event_id)
    if existing:
        click.echo(f"Error: Event '{event_id}' already exists: {existing.title}")
        return

    try:
        db.session.add(Event(id=event_id, title=title))
        db.session.commit()
        click.echo(f"Successfully created event: {title} ({event_id})")
    except Exception as e:
        db.session.rollback()
        click.echo(f"Error creating event: {e}")
