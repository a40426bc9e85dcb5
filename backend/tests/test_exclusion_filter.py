"""Tests for spending filter applied before detection."""

from datetime import date

from app.services.exclusion_filter import filter_spending


class TestFilterSpending:
    """Test which transactions reach the detector."""

    def test_keeps_outflows_on_own_accounts(self, make_record):
        txn = make_record(date(2024, 1, 1), -15.99, account_id="acc-1")
        assert filter_spending([txn], {"acc-1"}, set()) == [txn]

    def test_drops_foreign_accounts(self, make_record):
        txn = make_record(date(2024, 1, 1), -15.99, account_id="acc-other")
        assert filter_spending([txn], {"acc-1"}, set()) == []

    def test_drops_income_and_refunds(self, make_record):
        refund = make_record(date(2024, 1, 1), 15.99, account_id="acc-1")
        assert filter_spending([refund], {"acc-1"}, set()) == []

    def test_drops_excluded_categories(self, make_record):
        transfer = make_record(date(2024, 1, 1), -500, "Savings", "cat-transfer", account_id="acc-1")
        bill = make_record(date(2024, 1, 1), -80, "City Power", "cat-utility", account_id="acc-1")
        kept = filter_spending([transfer, bill], {"acc-1"}, {"cat-transfer"})
        assert kept == [bill]

    def test_uncategorised_kept(self, make_record):
        txn = make_record(date(2024, 1, 1), -9.99, "Netflix", None, account_id="acc-1")
        assert filter_spending([txn], {"acc-1"}, {"cat-transfer"}) == [txn]
