"""Tests for the append-only conversation store and its transitions."""

from __future__ import annotations

from datetime import datetime, timezone
import unittest

from farm_assistant.exceptions import (
    EmptySubmissionError,
    StoreClosedError,
    TurnInFlightError,
)
from farm_assistant.message_store import (
    FALLBACK_REPLY,
    GREETING,
    ConversationStore,
    append_assistant_result,
    append_user_turn,
    initial_state,
    prior_context,
)
from farm_assistant.models import (
    AssistantReply,
    Attachment,
    FailureKind,
    GatewayFailure,
    Sender,
)

SOIL_REPORT = Attachment(
    kind="image", reference="/tmp/soil.jpg", display_name="soil.jpg"
)
NOON = datetime(2025, 5, 18, 12, 0, tzinfo=timezone.utc)


class TransitionTests(unittest.TestCase):
    """Validate the pure state transition functions."""

    def test_initial_state_is_seeded_with_greeting(self) -> None:
        state = initial_state()
        self.assertEqual(len(state.history), 1)
        greeting = state.history[0]
        self.assertEqual(greeting.id, 1)
        self.assertEqual(greeting.sender, Sender.ASSISTANT)
        self.assertEqual(greeting.content, GREETING)
        self.assertFalse(state.pending)

    def test_user_turn_appends_and_sets_pending(self) -> None:
        state = initial_state()
        new_state, message_id = append_user_turn(state, "  rice  ")
        self.assertEqual(message_id, 2)
        self.assertEqual(len(new_state.history), 2)
        self.assertEqual(new_state.history[-1].content, "rice")
        self.assertEqual(new_state.history[-1].sender, Sender.USER)
        self.assertTrue(new_state.pending)

    def test_transitions_do_not_mutate_previous_snapshot(self) -> None:
        state = initial_state()
        new_state, _ = append_user_turn(state, "rice")
        self.assertEqual(len(state.history), 1)
        self.assertFalse(state.pending)
        self.assertIsNot(state, new_state)

    def test_empty_turn_without_attachment_is_rejected(self) -> None:
        state = initial_state()
        for text in ("", "   ", "\n\t"):
            with self.assertRaises(EmptySubmissionError):
                append_user_turn(state, text)

    def test_attachment_only_turn_is_accepted(self) -> None:
        state, _ = append_user_turn(initial_state(), "", SOIL_REPORT)
        message = state.history[-1]
        self.assertEqual(message.content, "")
        self.assertEqual(message.attachments, (SOIL_REPORT,))

    def test_second_turn_while_pending_is_rejected(self) -> None:
        state, _ = append_user_turn(initial_state(), "rice")
        with self.assertRaises(TurnInFlightError):
            append_user_turn(state, "soybeans")

    def test_reply_uses_server_timestamp(self) -> None:
        state, _ = append_user_turn(initial_state(), "rice")
        state = append_assistant_result(
            state, AssistantReply(text="Plant in May.", timestamp=NOON)
        )
        reply = state.history[-1]
        self.assertEqual(reply.sender, Sender.ASSISTANT)
        self.assertEqual(reply.content, "Plant in May.")
        self.assertEqual(reply.created_at, NOON)
        self.assertFalse(state.pending)

    def test_reply_without_timestamp_uses_completion_time(self) -> None:
        state, _ = append_user_turn(initial_state(), "rice")
        state = append_assistant_result(state, AssistantReply(text="ok"), now=NOON)
        self.assertEqual(state.history[-1].created_at, NOON)

    def test_failure_renders_fallback_text(self) -> None:
        state, _ = append_user_turn(initial_state(), "rice")
        for kind in FailureKind:
            result_state = append_assistant_result(state, GatewayFailure(kind=kind))
            self.assertEqual(result_state.history[-1].content, FALLBACK_REPLY)
            self.assertFalse(result_state.pending)

    def test_ids_are_monotonic(self) -> None:
        state = initial_state()
        for text in ("one", "two", "three"):
            state, _ = append_user_turn(state, text)
            state = append_assistant_result(state, AssistantReply(text="ok"))
        ids = [message.id for message in state.history]
        self.assertEqual(ids, sorted(ids))
        self.assertEqual(len(set(ids)), len(ids))

    def test_prior_context_excludes_latest_message(self) -> None:
        state, _ = append_user_turn(initial_state(), "rice")
        self.assertEqual(prior_context(state.history), state.history[:1])


class ConversationStoreTests(unittest.TestCase):
    """Validate the stateful store wrapper and its observers."""

    def test_observers_see_pending_toggle_once_per_turn(self) -> None:
        store = ConversationStore()
        seen: list[bool] = []
        store.subscribe(lambda state: seen.append(state.pending))
        for text in ("one", "two", "three"):
            store.append_user_turn(text)
            store.append_assistant_result(AssistantReply(text="ok"))
        self.assertEqual(seen, [True, False] * 3)

    def test_unsubscribe_stops_notifications(self) -> None:
        store = ConversationStore()
        seen: list[int] = []

        def observer(state) -> None:
            seen.append(state.message_count)

        store.subscribe(observer)
        store.unsubscribe(observer)
        store.append_user_turn("rice")
        self.assertEqual(seen, [])

    def test_failing_observer_does_not_block_others(self) -> None:
        store = ConversationStore()
        seen: list[int] = []

        def broken(_state) -> None:
            raise RuntimeError("render failed")

        store.subscribe(broken)
        store.subscribe(lambda state: seen.append(state.message_count))
        with self.assertLogs("farm_assistant.message_store", level="ERROR"):
            store.append_user_turn("rice")
        self.assertEqual(seen, [2])

    def test_closed_store_ignores_late_results(self) -> None:
        store = ConversationStore()
        store.append_user_turn("rice")
        store.close()
        store.append_assistant_result(AssistantReply(text="late"))
        self.assertEqual(len(store.history), 2)
        self.assertTrue(store.pending)

    def test_closed_store_refuses_new_turns(self) -> None:
        store = ConversationStore()
        store.close()
        with self.assertRaises(StoreClosedError):
            store.append_user_turn("rice")


if __name__ == "__main__":
    unittest.main()
