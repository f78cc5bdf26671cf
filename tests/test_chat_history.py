"""
Tests for the in-memory chat history store.
"""
from erp_assistant.memory import ChatMessage, InMemoryChatHistoryStore


def _msg(content, user_id="u1", tenant_id="t1", role="user"):
    return ChatMessage(role=role, content=content, user_id=user_id, tenant_id=tenant_id)


class TestInMemoryChatHistoryStore:
    """Tests for InMemoryChatHistoryStore."""

    def test_newest_first_with_paging(self):
        store = InMemoryChatHistoryStore()
        for i in range(5):
            store.save(_msg(f"m{i}"))

        assert [m.content for m in store.get_history("t1", "u1", limit=2)] == ["m4", "m3"]
        assert [m.content for m in store.get_history("t1", "u1", limit=2, offset=2)] == ["m2", "m1"]

    def test_bounded(self):
        store = InMemoryChatHistoryStore(max_messages=3)
        for i in range(5):
            store.save(_msg(f"m{i}"))

        assert store.count("t1", "u1") == 3
        assert [m.content for m in store.get_history("t1", "u1")] == ["m4", "m3", "m2"]

    def test_scoped_by_tenant_and_user(self):
        store = InMemoryChatHistoryStore()
        store.save(_msg("a", user_id="u1"))
        store.save(_msg("b", user_id="u2"))
        store.save(_msg("c", tenant_id="t2"))

        assert [m.content for m in store.get_history("t1", "u1")] == ["a"]
        assert store.count("t2", "u1") == 1

    def test_delete_history(self):
        store = InMemoryChatHistoryStore()
        store.save(_msg("a"))

        store.delete_history("t1", "u1")

        assert store.get_history("t1", "u1") == []
        assert store.count("t1", "u1") == 0

    def test_messages_get_ids(self):
        first, second = _msg("a"), _msg("a")

        assert first.id != second.id
        assert first.created_at is not None
