import click
from flask.cli import with_appcontext
from app.constants import MintMode
from app.services import get_services


@click.command('reconcile-mints')
@click.option('--limit', type=int, default=None, help='Maximum number of jobs to process')
@with_appcontext
def reconcile_mints(limit):
    """
    Finishes mints that reached the chain but never produced a ticket.

    Picks up every mint job still marked 'submitted' (caller disconnected,
    confirmation timed out, or the final write failed), fetches its receipt
    and stores the ticket.
    """
    services = get_services()
    if services.mints.mode is not MintMode.LIVE:
        click.echo("Minting is simulated; nothing to reconcile.")
        return

    summary = services.mints.reconcile_pending(limit=limit)
    click.echo(
        f"Reconciled mints: {summary['completed']} completed, "
        f"{summary['pending']} still pending, {summary['failed']} failed."
    )
