"""Tests for modules/billing/repository.py (Supabase implementation)."""

from unittest.mock import MagicMock

import pytest

from modules.billing.models import SubscriptionStatus, SubscriptionTier
from modules.billing.repository import SupabaseSubscriptionRepository
from shared.exceptions import NotFoundError

ROW = {
    "id": "1b2c3d4e-5f60-4718-9a0b-1c2d3e4f5a6b",
    "user_id": "user-1",
    "tier": "family",
    "status": "active",
    "current_period_start": None,
    "current_period_end": "2025-04-01T00:00:00+00:00",
    "cancel_at_period_end": False,
    "created_at": "2025-03-01T00:00:00+00:00",
    "updated_at": "2025-03-01T00:00:00+00:00",
}


class TestSupabaseSubscriptionRepository:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def repo(self, mock_db):
        return SupabaseSubscriptionRepository(mock_db)

    def test_create_if_absent_upserts_then_reads(self, repo, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [ROW]

        subscription = repo.create_if_absent("user-1")

        _, kwargs = mock_db.table.return_value.upsert.call_args
        assert kwargs == {"on_conflict": "user_id", "ignore_duplicates": True}
        assert subscription.tier == SubscriptionTier.FAMILY

    def test_update_subscription(self, repo, mock_db):
        mock_db.table.return_value.update.return_value.eq.return_value.execute.return_value.data = [
            {**ROW, "status": "inactive"}
        ]

        updated = repo.update_subscription("user-1", status=SubscriptionStatus.INACTIVE)

        sent = mock_db.table.return_value.update.call_args[0][0]
        assert sent["status"] == "inactive"
        assert "tier" not in sent
        assert updated.status == SubscriptionStatus.INACTIVE

    def test_update_missing_subscription(self, repo, mock_db):
        mock_db.table.return_value.update.return_value.eq.return_value.execute.return_value.data = []
        with pytest.raises(NotFoundError):
            repo.update_subscription("user-1", tier=SubscriptionTier.TEAM)
