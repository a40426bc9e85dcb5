"""Tests for matching detected candidates to stored recurring records."""

import pytest
import uuid
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from app.models.recurring import Frequency, RecurringTransaction
from app.repositories import RecurringRepository
from app.services.detection_types import PatternCandidate
from app.services.recurring_store import match_existing, save_candidates


def make_candidate(merchant="Netflix", amount="15.99"):
    return PatternCandidate(
        user_id="user-123",
        merchant_name=merchant,
        description=merchant.upper(),
        amount=Decimal(amount),
        frequency=Frequency.monthly,
        last_date=date(2024, 3, 15),
        next_date=date(2024, 4, 15),
        confidence=0.95,
    )


def stored(record_id, merchant="Netflix", amount="15.99", status="active"):
    return SimpleNamespace(id=record_id, merchant_name=merchant, amount=Decimal(amount), status=status)


class TestMatchExisting:
    """Test id/status continuity."""

    def test_reuses_id_and_status(self):
        existing = [stored("rec-1", status="ignored")]
        [matched] = match_existing([make_candidate()], existing)

        assert matched.id == "rec-1"
        assert matched.status == "ignored"

    def test_price_change_within_five_dollars(self):
        existing = [stored("rec-1", amount="15.99")]
        [matched] = match_existing([make_candidate(amount="20.99")], existing)
        assert matched.id == "rec-1"

    def test_price_change_beyond_five_dollars(self):
        existing = [stored("rec-1", amount="15.99")]
        [matched] = match_existing([make_candidate(amount="21.00")], existing)

        assert matched.id != "rec-1"
        assert matched.status == "active"
        uuid.UUID(matched.id)

    def test_different_merchant_not_matched(self):
        existing = [stored("rec-1", merchant="Hulu")]
        [matched] = match_existing([make_candidate()], existing)
        assert matched.id != "rec-1"

    def test_record_claimed_once(self):
        existing = [stored("rec-1", merchant="Amazon", amount="10.99")]
        first, second = match_existing(
            [make_candidate("Amazon", "10.99"), make_candidate("Amazon", "12.65")],
            existing,
        )
        assert first.id == "rec-1"
        assert second.id != "rec-1"

    def test_close_prices_can_swap_identities(self):
        """
        Two Amazon subscriptions priced within $5 of each other match whichever
        stored record comes first. Pinned so a matching change is deliberate.
        """
        existing = [
            stored("rec-small", merchant="Amazon", amount="8.99", status="ignored"),
            stored("rec-large", merchant="Amazon", amount="12.65", status="active"),
        ]
        large, small = match_existing(
            [make_candidate("Amazon", "12.65"), make_candidate("Amazon", "8.99")],
            existing,
        )

        assert large.id == "rec-small"
        assert large.status == "ignored"
        assert small.id == "rec-large"

    def test_new_candidates_get_unique_ids(self):
        a, b = match_existing([make_candidate("Netflix"), make_candidate("Hulu")], [])
        assert a.id and b.id and a.id != b.id


class TestSaveCandidates:
    """Test the batch upsert."""

    def test_inserts_then_updates(self, db_session):
        repository = RecurringRepository(db_session)
        [candidate] = match_existing([make_candidate()], [])

        save_candidates(repository, [candidate])
        row = db_session.query(RecurringTransaction).one()
        assert row.id == candidate.id
        assert row.amount == Decimal("15.99")
        assert row.frequency == "monthly"
        assert row.confidence == Decimal("0.95")

        [updated] = match_existing([make_candidate(amount="17.99")], repository.list_by_user("user-123"))
        save_candidates(repository, [updated])

        row = db_session.query(RecurringTransaction).one()
        assert row.id == candidate.id
        assert row.amount == Decimal("17.99")
