"""Ticket issuance in live and simulated mode."""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app import db
from app.constants import MintJobStatus, SIMULATED_TOKEN_ID_OFFSET, SIMULATED_TOKEN_ID_RANGE
from app.errors import (
    MintTransactionError,
    NotFoundError,
    ReconciliationError,
    TokenIdUnresolvedError,
    ValidationError,
)
from app.models import Account, MintJob, Ticket
from app.services import get_services

OTHER = '0xFFcf8FDEE72ac11b5c542428B35EEF5769C409f0'


def test_live_mint_stores_chain_backed_ticket(seeded, fake_chain):
    with seeded.app_context():
        ticket = get_services().mints.issue_ticket('E1', 'U1')

        account = db.session.get(Account, 'U1')
        assert ticket.token_id == 7
        assert ticket.chain_backed is True
        assert ticket.consumed is False
        assert ticket.owner_address == account.wallet_address
        assert ticket.mint_tx_hash in fake_chain.receipts

        job = MintJob.query.one()
        assert job.status == MintJobStatus.COMPLETED
        assert job.ticket_id == ticket.id
        assert job.tx_hash == ticket.mint_tx_hash
        assert job.metadata_uri == 'https://metadata.test/nft/E1/U1'

    assert fake_chain.calls['submit_mint'] == 1
    assert fake_chain.calls['total_supply'] == 0
    assert fake_chain.calls['owner_of'] == 0


def test_live_mint_without_typed_event_uses_supply(seeded, fake_chain):
    fake_chain.log_style = 'none'
    with seeded.app_context():
        ticket = get_services().mints.issue_ticket('E1', 'U1')
        assert ticket.token_id == 7
    assert fake_chain.calls['total_supply'] == 1
    assert fake_chain.calls['owner_of'] == 1


def test_second_purchase_gets_next_token(seeded, fake_chain):
    with seeded.app_context():
        mints = get_services().mints
        first = mints.issue_ticket('E1', 'U1')
        second = mints.issue_ticket('E1', 'U1')
        assert (first.token_id, second.token_id) == (7, 8)
        assert first.owner_address == second.owner_address


def test_unknown_event_and_user(seeded, fake_chain):
    with seeded.app_context():
        mints = get_services().mints
        with pytest.raises(NotFoundError):
            mints.issue_ticket('NOPE', 'U1')
        with pytest.raises(NotFoundError):
            mints.issue_ticket('E1', 'NOBODY')
        with pytest.raises(ValidationError):
            mints.issue_ticket('', 'U1')
        assert Ticket.query.count() == 0
    assert fake_chain.calls['submit_mint'] == 0


def test_submission_failure_marks_job_failed(seeded, fake_chain):
    fake_chain.fail_submit = True
    with seeded.app_context():
        with pytest.raises(MintTransactionError):
            get_services().mints.issue_ticket('E1', 'U1')

        job = MintJob.query.one()
        assert job.status == MintJobStatus.FAILED
        assert job.tx_hash is None
        assert 'nonce too low' in job.error
        assert Ticket.query.count() == 0


def test_reverted_mint_creates_nothing(seeded, fake_chain):
    fake_chain.revert = True
    with seeded.app_context():
        with pytest.raises(MintTransactionError) as excinfo:
            get_services().mints.issue_ticket('E1', 'U1')

        job = MintJob.query.one()
        assert excinfo.value.tx_hash == job.tx_hash
        assert job.status == MintJobStatus.FAILED
        assert Ticket.query.count() == 0


def test_unresolvable_token_id_fails_mint(seeded, fake_chain):
    fake_chain.log_style = 'none'
    fake_chain.supply_override = 0
    with seeded.app_context():
        with pytest.raises(TokenIdUnresolvedError) as excinfo:
            get_services().mints.issue_ticket('E1', 'U1')

        job = MintJob.query.one()
        assert excinfo.value.tx_hash == job.tx_hash
        assert job.status == MintJobStatus.FAILED
        assert Ticket.query.count() == 0


def test_foreign_owner_at_supply_counter_fails_mint(seeded, fake_chain):
    fake_chain.log_style = 'none'
    fake_chain.owners[8] = OTHER
    with seeded.app_context():
        with pytest.raises(TokenIdUnresolvedError):
            get_services().mints.issue_ticket('E1', 'U1')
        assert Ticket.query.count() == 0


def test_confirmation_timeout_leaves_job_for_reconciler(seeded, fake_chain):
    fake_chain.timeout_wait = True
    with seeded.app_context():
        mints = get_services().mints
        with pytest.raises(MintTransactionError) as excinfo:
            mints.issue_ticket('E1', 'U1')

        job = MintJob.query.one()
        assert job.status == MintJobStatus.SUBMITTED
        assert excinfo.value.tx_hash == job.tx_hash
        assert Ticket.query.count() == 0

        summary = mints.reconcile_pending()
        assert summary == {'completed': 1, 'pending': 0, 'failed': 0}

        ticket = Ticket.query.one()
        assert ticket.token_id == 7
        assert ticket.mint_tx_hash == job.tx_hash
        assert db.session.get(MintJob, job.id).status == MintJobStatus.COMPLETED


def test_reconcile_leaves_unconfirmed_jobs_pending(seeded, fake_chain):
    fake_chain.timeout_wait = True
    with seeded.app_context():
        mints = get_services().mints
        with pytest.raises(MintTransactionError):
            mints.issue_ticket('E1', 'U1')
        fake_chain.receipts.clear()

        assert mints.reconcile_pending() == {'completed': 0, 'pending': 1, 'failed': 0}
        assert MintJob.query.one().status == MintJobStatus.SUBMITTED


def test_storage_failure_after_mint_is_reconcilable(seeded, fake_chain):
    with seeded.app_context():
        mints = get_services().mints
        failure = OperationalError('INSERT INTO tickets', {}, Exception('disk I/O error'))
        with patch.object(db.session, 'flush', side_effect=failure):
            with pytest.raises(ReconciliationError) as excinfo:
                mints.issue_ticket('E1', 'U1')

        err = excinfo.value
        assert err.token_id == 7
        assert err.tx_hash in fake_chain.receipts
        assert Ticket.query.count() == 0
        assert MintJob.query.one().status == MintJobStatus.SUBMITTED

        assert mints.reconcile_pending()['completed'] == 1
        assert Ticket.query.one().token_id == 7


def test_simulated_mint_never_touches_chain(simulated_seeded, fake_chain):
    with simulated_seeded.app_context():
        mints = get_services().mints
        ticket = mints.issue_ticket('E1', 'U1')

        assert ticket.chain_backed is False
        assert ticket.mint_tx_hash is None
        assert SIMULATED_TOKEN_ID_OFFSET <= ticket.token_id < SIMULATED_TOKEN_ID_OFFSET + SIMULATED_TOKEN_ID_RANGE
        assert ticket.owner_address == db.session.get(Account, 'U1').wallet_address
        assert MintJob.query.count() == 0
        assert mints.reconcile_pending() == {'completed': 0, 'pending': 0, 'failed': 0}

    assert fake_chain.calls['submit_mint'] == 0
    assert fake_chain.calls['wait_for_receipt'] == 0


def test_simulated_ids_stay_clear_of_chain_ids(simulated_seeded):
    with simulated_seeded.app_context():
        with patch('app.services.mint_service.secrets.randbelow', return_value=7):
            ticket = get_services().mints.issue_ticket('E1', 'U1')

        assert ticket.token_id == SIMULATED_TOKEN_ID_OFFSET + 7
        assert ticket.token_id < 2 ** 53


def test_reconcile_survives_store_failure(seeded, fake_chain):
    with seeded.app_context():
        mints = get_services().mints
        ticket = mints.issue_ticket('E1', 'U1')
        # Ticket stored but the job was left behind as submitted
        job = MintJob.query.one()
        job.status = MintJobStatus.SUBMITTED
        db.session.commit()

        failure = OperationalError('UPDATE mint_jobs', {}, Exception('database is locked'))
        with patch.object(db.session, 'commit', side_effect=failure):
            summary = mints.reconcile_pending()
        assert summary == {'completed': 0, 'pending': 1, 'failed': 0}
        assert MintJob.query.one().status == MintJobStatus.SUBMITTED

        assert mints.reconcile_pending() == {'completed': 1, 'pending': 0, 'failed': 0}
        job = MintJob.query.one()
        assert job.status == MintJobStatus.COMPLETED
        assert job.ticket_id == ticket.id
        assert Ticket.query.count() == 1
    assert fake_chain.calls['get_receipt'] == 0
