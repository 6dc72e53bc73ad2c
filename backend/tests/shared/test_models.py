"""Tests for shared/models.py."""

import pytest
from pydantic import TypeAdapter, ValidationError

from shared.models import AuthContext, ChatAuthContext, WebAuthContext


class TestWebAuthContext:
    def test_has_no_group(self):
        context = WebAuthContext(user_id="user-1")
        assert context.source == "web"
        assert context.group_id is None

    def test_is_frozen(self):
        context = WebAuthContext(user_id="user-1")
        with pytest.raises(ValidationError):
            context.user_id = "user-2"


class TestChatAuthContext:
    def test_requires_group_and_binding(self):
        with pytest.raises(ValidationError):
            ChatAuthContext(user_id="user-1")

    def test_fields(self):
        context = ChatAuthContext(user_id="user-1", group_id="group-1", binding_id="binding-1")
        assert context.source == "chat"
        assert context.group_id == "group-1"


class TestAuthContextUnion:
    def test_discriminates_on_source(self):
        adapter = TypeAdapter(AuthContext)
        web = adapter.validate_python({"source": "web", "user_id": "u"})
        chat = adapter.validate_python(
            {"source": "chat", "user_id": "u", "group_id": "g", "binding_id": "b"}
        )
        assert isinstance(web, WebAuthContext)
        assert isinstance(chat, ChatAuthContext)
