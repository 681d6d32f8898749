import threading

from backend.config import _parse_users
from backend.models.conversation import ConversationMode, ConversationStatus


def test_seed_users_is_insert_or_ignore(store):
    users = _parse_users("Alice@Example.com:Alice, bob@example.com:Bob,broken-entry")
    assert users == [("alice@example.com", "Alice"), ("bob@example.com", "Bob")]
    assert store.seed_users(users) == 2
    assert store.seed_users(users) == 0
    assert store.get_user_by_email("ALICE@example.com").name == "Alice"


def test_messages_are_ordered_oldest_first(store, user):
    conversation = store.create_conversation(user.id, ConversationMode.SCRIPTED, current_question_id=1)
    for role, text in [("assistant", "q1"), ("user", "a1"), ("assistant", "q2")]:
        store.add_message(conversation.id, role=role, content=text)
    assert [m.content for m in store.list_messages(conversation.id)] == ["q1", "a1", "q2"]


def test_update_conversation(store, user):
    conversation = store.create_conversation(user.id, ConversationMode.SCRIPTED, current_question_id=1)
    before = conversation.updated_at
    store.update_conversation(conversation.id, current_question_id=5)
    updated = store.update_conversation(conversation.id, status=ConversationStatus.COMPLETED)
    assert updated.current_question_id == 5
    assert updated.status == ConversationStatus.COMPLETED
    assert updated.updated_at >= before


def test_update_user_keeps_unset_fields(store, user):
    updated = store.update_user(user.id, name="Jane Doe")
    assert updated.email == "jane@example.com"
    assert store.get_user(user.id).name == "Jane Doe"
    assert store.update_user(999, name="Nobody") is None


def test_delete_user_drops_only_their_conversations(store, user):
    other = store.create_user("other@example.com", "Other")
    mine = store.create_conversation(user.id, ConversationMode.SCRIPTED, current_question_id=1)
    theirs = store.create_conversation(other.id, ConversationMode.ASSISTED)
    store.add_message(mine.id, role="assistant", content="q1")

    assert store.delete_user(user.id) is True
    assert store.get_conversation(mine.id) is None
    assert store.list_messages(mine.id) == []
    assert store.list_conversations(other.id) == [theirs]
    assert store.delete_user(user.id) is False


def test_concurrent_updates_are_all_applied(store, user):
    conversations = [
        store.create_conversation(user.id, ConversationMode.SCRIPTED, current_question_id=1) for _ in range(8)
    ]

    def advance(conversation_id):
        for question_id in range(2, 15):
            store.update_conversation(conversation_id, current_question_id=question_id)

    threads = [threading.Thread(target=advance, args=(c.id,)) for c in conversations]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(store.get_conversation(c.id).current_question_id == 14 for c in conversations)
