"""Tests for modules/chat_binding/repository.py (Supabase implementation)."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from modules.chat_binding.exceptions import (
    BindingRaceError,
    BindRequestNotFoundError,
    NonceMismatchError,
)
from modules.chat_binding.models import BindingStatus, ChatPlatform
from modules.chat_binding.repository import SupabaseChatBindingRepository

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
REQUEST_ID = "0d6f3c1a-5b7e-4c2d-8f9a-1b2c3d4e5f60"
BINDING_ID = "7a1e9b2c-3d4f-4a5b-8c6d-7e8f9a0b1c2d"
GROUP_ID = "2c3d4e5f-6a7b-4c8d-9e0f-1a2b3c4d5e6f"
USER_ID = "9f8e7d6c-5b4a-4392-8170-6f5e4d3c2b1a"

REQUEST_ROW = {
    "id": REQUEST_ID,
    "platform": "telegram",
    "external_chat_id": "-100123",
    "nonce_hash": "ab" * 32,
    "user_id": USER_ID,
    "expires_at": "2025-03-10T12:15:00+00:00",
    "created_at": "2025-03-10T12:00:00+00:00",
    "consumed_at": None,
}

BINDING_ROW = {
    "id": BINDING_ID,
    "group_id": GROUP_ID,
    "platform": "telegram",
    "external_chat_id": "-100123",
    "status": "active",
    "bound_by": USER_ID,
    "bound_at": "2025-03-10T12:01:00.123456+00:00",
    "revoked_at": None,
}


def _api_error(code: str) -> APIError:
    return APIError({"message": "error", "code": code, "hint": None, "details": None})


class TestSupabaseChatBindingRepository:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def repo(self, mock_db):
        return SupabaseChatBindingRepository(mock_db)

    def test_claim_is_a_filtered_update(self, repo, mock_db):
        chain = mock_db.table.return_value.update.return_value
        chain.eq.return_value.is_.return_value.is_.return_value.gt.return_value.execute.return_value.data = [REQUEST_ROW]

        claimed = repo.claim_request(REQUEST_ID, USER_ID, NOW)

        mock_db.table.assert_called_with("chat_bind_requests")
        mock_db.table.return_value.update.assert_called_once_with({"user_id": USER_ID})
        chain.eq.assert_called_once_with("id", REQUEST_ID)
        chain.eq.return_value.is_.assert_called_once_with("user_id", "null")
        chain.eq.return_value.is_.return_value.is_.assert_called_once_with("consumed_at", "null")
        assert claimed.user_id == USER_ID

    def test_claim_lost_returns_none(self, repo, mock_db):
        chain = mock_db.table.return_value.update.return_value
        chain.eq.return_value.is_.return_value.is_.return_value.gt.return_value.execute.return_value.data = []
        assert repo.claim_request(REQUEST_ID, USER_ID, NOW) is None

    def test_claim_non_uuid_skips_storage(self, repo, mock_db):
        assert repo.claim_request("not-a-uuid", USER_ID, NOW) is None
        mock_db.table.assert_not_called()

    def test_confirm_calls_function(self, repo, mock_db):
        mock_db.rpc.return_value.execute.return_value.data = {
            "outcome": "confirmed",
            "binding": BINDING_ROW,
        }

        binding = repo.confirm_binding(REQUEST_ID, "ab" * 32, USER_ID, GROUP_ID, NOW)

        name, params = mock_db.rpc.call_args[0]
        assert name == "confirm_chat_binding"
        assert params == {
            "p_request_id": REQUEST_ID,
            "p_nonce_hash": "ab" * 32,
            "p_user_id": USER_ID,
            "p_group_id": GROUP_ID,
            "p_now": NOW.isoformat(),
        }
        assert binding.id == BINDING_ID
        assert binding.status == BindingStatus.ACTIVE

    @pytest.mark.parametrize("outcome, error", [
        ("not_found", BindRequestNotFoundError),
        ("consumed", BindingRaceError),
        ("mismatch", NonceMismatchError),
    ])
    def test_confirm_outcomes(self, repo, mock_db, outcome, error):
        mock_db.rpc.return_value.execute.return_value.data = {"outcome": outcome}
        with pytest.raises(error):
            repo.confirm_binding(REQUEST_ID, "ab" * 32, USER_ID, GROUP_ID, NOW)

    def test_confirm_unique_violation_is_a_race(self, repo, mock_db):
        mock_db.rpc.return_value.execute.side_effect = _api_error("23505")
        with pytest.raises(BindingRaceError):
            repo.confirm_binding(REQUEST_ID, "ab" * 32, USER_ID, GROUP_ID, NOW)

    def test_get_binding_maps_row(self, repo, mock_db):
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = [BINDING_ROW]

        binding = repo.get_binding(BINDING_ID)

        assert binding.platform == ChatPlatform.TELEGRAM
        assert binding.bound_at == datetime(2025, 3, 10, 12, 1, 0, 123456, tzinfo=timezone.utc)

    def test_get_binding_unknown_id(self, repo, mock_db):
        assert repo.get_binding("nope") is None
        mock_db.table.assert_not_called()

    def test_create_request_stores_hash(self, repo, mock_db):
        mock_db.table.return_value.insert.return_value.execute.return_value.data = [
            {**REQUEST_ROW, "user_id": None}
        ]

        request = repo.create_request(
            ChatPlatform.TELEGRAM, "-100123", "ab" * 32, NOW + timedelta(minutes=15), NOW
        )

        inserted = mock_db.table.return_value.insert.call_args[0][0]
        assert inserted["nonce_hash"] == "ab" * 32
        assert "nonce" not in inserted
        assert request.user_id is None
