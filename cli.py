# Role: Local developer CLI to run an intake conversation without the web stack.
# Uses the same controller, flow engine and assisted collaborator as the API, against an in-memory store.

from __future__ import annotations

import backend.config
backend.config.load_env()

from backend.core.conversation_controller import ConversationController
from backend.core.conversation_store import ConversationStore
from backend.core.errors import IntakeError
from backend.core.flow_engine import FlowEngine
from backend.core.flow_loader import load_flow_definition
from backend.llm.intake_assistant import IntakeAssistant
from backend.models.conversation import ConversationMode
from backend.utils.logging import setup_logging


def _ask_mode() -> str:
    choice = input("Mode [scripted/assisted] (default scripted): ").strip().lower()
    return choice if choice in {m.value for m in ConversationMode} else ConversationMode.SCRIPTED.value


def _start(controller: ConversationController, user_id: int) -> int:
    result = controller.start_conversation(user_id, _ask_mode())
    print(f"conversation_id: {result.conversation_id} ({result.mode.value})")
    print(f"\nAssistant: {result.question}")
    return result.conversation_id


def main() -> None:
    # 1) Load the flow and create a local user
    # 2) Maintain a conversation_id across turns
    # 3) Route user input -> controller -> print the next prompt
    setup_logging()
    print("Legal Intake CLI")
    print("Commands: /new (new conversation), /exit")
    print("-" * 50)

    store = ConversationStore()
    controller = ConversationController(
        store=store,
        engine=FlowEngine(load_flow_definition()),
        assistant=IntakeAssistant(),
    )
    name = input("Your name: ").strip() or "Guest"
    user = store.create_user("cli@example.com", name)

    conversation_id = _start(controller, user.id)
    completed = False

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            conversation_id = _start(controller, user.id)
            completed = False
            continue

        if completed:
            print("This conversation is completed. Type /new to start another one.")
            continue

        try:
            result = controller.handle_turn(conversation_id, user_message)
        except IntakeError as e:
            print(f"\n[error] {e.message}")
            continue

        print(f"\nAssistant: {result.question}")
        completed = result.completed


if __name__ == "__main__":
    main()
