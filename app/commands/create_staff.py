import click
from flask.cli import with_appcontext
from app.errors import TicketingError
from app.services.staff_service import StaffService


@click.command('create-staff')
@click.option('--event-id', required=True, help='Event the staff account may scan for')
@click.option('--email', required=True, help='Staff login email')
@click.password_option(help='Staff login password')
@with_appcontext
def create_staff(event_id, email, password):
    """Creates a gate staff account for one event."""
    try:
        staff = StaffService.create_staff(event_id, email, password)
    except TicketingError as e:
        click.echo(f"Error: {e.message}")
        return
    click.echo(f"Created staff {staff.email} (id {staff.id}) for event {staff.event_id}")
