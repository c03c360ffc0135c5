"""
Tests for the schedule negotiation engine.

All text-generation calls go through FakeChat (see conftest); nothing touches the network.
"""

import asyncio

import pytest

from core.errors import ConfigurationError, NoWorkError, NotFoundError, TransportError
from core.negotiator import ScheduleNegotiator, is_schedule_reply
from conftest import DAY, SCHEDULE_TEXT, FakeChat
from lifeflow_calendar.export import blocks_for_schedule
from planning.daily_planner import plan_day


def _neg(store, chat, **kw):
    return ScheduleNegotiator(store, chat=chat, day=DAY, **kw)


# ============================================================
# Reply classification
# ============================================================


class TestIsScheduleReply:
    @pytest.mark.parametrize("text", [
        "⏰ 9 - 10 | walk",
        "Let's start at 9:30 instead",
        "Moved it to 14:00.",
    ])
    def test_detects_schedule(self, text):
        assert is_schedule_reply(text)

    @pytest.mark.parametrize("text", ["", "You're doing great!", "How about 9:15?"])
    def test_plain_conversation(self, text):
        assert not is_schedule_reply(text)


# ============================================================
# generate
# ============================================================


class TestGenerate:
    def test_missing_credential_fails_before_any_call(self, schedule_store, prefs, make_task, fake_chat):
        neg = _neg(schedule_store, fake_chat, api_key="")
        with pytest.raises(ConfigurationError):
            asyncio.run(neg.generate([make_task()], prefs.model_copy(update={"api_key": ""})))
        assert fake_chat.call_count == 0
        assert schedule_store.load(DAY) is None

    def test_no_pending_tasks(self, schedule_store, prefs, fake_chat):
        neg = _neg(schedule_store, fake_chat)
        with pytest.raises(NoWorkError):
            asyncio.run(neg.generate([], prefs))
        assert fake_chat.call_count == 0

    def test_engine_key_used_when_prefs_have_none(self, schedule_store, prefs, make_task, fake_chat):
        neg = _neg(schedule_store, fake_chat, api_key="sk-engine")
        asyncio.run(neg.generate([make_task()], prefs.model_copy(update={"api_key": None})))
        assert fake_chat.calls[0]["api_key"] == "sk-engine"

    def test_prompt_contents(self, schedule_store, make_task, fake_chat, prefs):
        prefs = prefs.model_copy(update={"personal_notes": "I focus best in the morning"})
        tasks = [make_task("Write report", minutes=90, priority="high", deadline=DAY)]
        neg = _neg(schedule_store, fake_chat)
        asyncio.run(neg.generate(tasks, prefs))

        call = fake_chat.calls[0]
        assert call["system_prompt"] is None
        assert len(call["turns"]) == 1
        prompt = call["turns"][0].text
        assert call["turns"][0].role == "user"
        assert "Monday" in prompt and "2024-01-15" in prompt
        assert "08:00" in prompt and "23:00" in prompt
        assert "45 minutes" in prompt and "15 minutes" in prompt
        assert "I focus best in the morning" in prompt
        assert "Write report (about 90 min, priority: high, due: 2024-01-15)" in prompt
        assert "⏰ HH:MM - HH:MM | label" in prompt

    def test_stores_schedule_and_seeds_transcript(self, schedule_store, prefs, make_task, fake_chat):
        neg = _neg(schedule_store, fake_chat)
        schedule = asyncio.run(neg.generate([make_task()], prefs))

        assert schedule.content == SCHEDULE_TEXT
        assert schedule.confirmed is False
        assert schedule_store.load(DAY) == schedule
        assert [(t.role, t.text) for t in neg.transcript] == [("assistant", SCHEDULE_TEXT)]
        assert neg.busy is False

    def test_transport_error_propagates(self, schedule_store, prefs, make_task, failing_chat):
        neg = _neg(schedule_store, failing_chat)
        with pytest.raises(TransportError):
            asyncio.run(neg.generate([make_task()], prefs))
        assert schedule_store.load(DAY) is None
        assert neg.busy is False

    def test_clear_after_confirm_then_generate_is_fresh(self, schedule_store, prefs, make_task, fake_chat):
        neg = _neg(schedule_store, fake_chat)
        asyncio.run(neg.generate([make_task()], prefs))
        assert neg.confirm().confirmed is True

        neg.clear()
        assert schedule_store.load(DAY) is None
        assert neg.transcript == []

        again = asyncio.run(neg.generate([make_task()], prefs))
        assert again.confirmed is False
        assert schedule_store.load(DAY).confirmed is False


# ============================================================
# revise
# ============================================================


class TestRevise:
    def _generated(self, store, prefs, make_task, replies):
        chat = FakeChat(replies=[SCHEDULE_TEXT] + replies)
        neg = _neg(store, chat)
        asyncio.run(neg.generate([make_task()], prefs))
        return neg, chat

    def test_schedule_reply_overwrites_content(self, schedule_store, prefs, make_task):
        new_plan = "Sure! Start at 10:30 instead."
        neg, _ = self._generated(schedule_store, prefs, make_task, [new_plan])

        rev = asyncio.run(neg.revise("Can I sleep in?", prefs))
        assert rev.schedule_updated is True
        assert rev.reply == new_plan
        assert schedule_store.load(DAY).content == new_plan

    def test_conversational_reply_leaves_content(self, schedule_store, prefs, make_task):
        neg, _ = self._generated(schedule_store, prefs, make_task, ["You've got this!"])

        rev = asyncio.run(neg.revise("Thanks", prefs))
        assert rev.schedule_updated is False
        assert schedule_store.load(DAY).content == SCHEDULE_TEXT

    def test_revision_after_confirm_resets_confirmed(self, schedule_store, prefs, make_task):
        neg, _ = self._generated(schedule_store, prefs, make_task, ["⏰ 10:00 - 10:45 | Write report"])
        neg.confirm()

        asyncio.run(neg.revise("Push it back an hour", prefs))
        assert schedule_store.load(DAY).confirmed is False

    def test_request_framing_and_transcript(self, schedule_store, prefs, make_task):
        neg, chat = self._generated(schedule_store, prefs, make_task, ["Okay!"])
        asyncio.run(neg.revise("Less work please", prefs))

        call = chat.calls[-1]
        assert "complete revised plan" in call["system_prompt"]
        assert "45 minutes" in call["system_prompt"]
        assert [t.role for t in call["turns"]] == ["assistant", "user"]
        assert [t.role for t in neg.transcript] == ["assistant", "user", "assistant"]

    def test_history_window_is_ten_turns(self, schedule_store, prefs, make_task):
        neg, chat = self._generated(schedule_store, prefs, make_task, ["ok"])
        for i in range(8):
            asyncio.run(neg.revise(f"message {i}", prefs))

        sent = chat.calls[-1]["turns"]
        assert len(sent) == 10
        assert sent[-1].text == "message 7"
        assert len(neg.transcript) == 17

    def test_transport_error_becomes_apology(self, schedule_store, prefs, make_task):
        neg, chat = self._generated(schedule_store, prefs, make_task, [])
        chat.error = TransportError("upstream timed out")

        rev = asyncio.run(neg.revise("Move lunch", prefs))
        assert rev.schedule_updated is False
        assert "upstream timed out" in rev.reply
        assert neg.transcript[-1].role == "assistant"
        assert neg.transcript[-1].text == rev.reply
        assert schedule_store.load(DAY).content == SCHEDULE_TEXT
        assert neg.busy is False

    def test_revise_without_credential(self, schedule_store, prefs, fake_chat):
        neg = _neg(schedule_store, fake_chat)
        with pytest.raises(ConfigurationError):
            asyncio.run(neg.revise("hi", prefs.model_copy(update={"api_key": None})))
        assert fake_chat.call_count == 0

    def test_schedule_reply_creates_record_when_missing(self, schedule_store, prefs):
        neg = _neg(schedule_store, FakeChat(replies=["⏰ 09:00 - 09:30 | Stretch"]))
        asyncio.run(neg.revise("Plan something short", prefs))
        assert schedule_store.load(DAY).content == "⏰ 09:00 - 09:30 | Stretch"


# ============================================================
# confirm / clear / resume
# ============================================================


class TestLifecycle:
    def test_confirm_without_schedule(self, schedule_store, fake_chat):
        with pytest.raises(NotFoundError):
            _neg(schedule_store, fake_chat).confirm()

    def test_clear_without_schedule(self, schedule_store, fake_chat):
        with pytest.raises(NotFoundError):
            _neg(schedule_store, fake_chat).clear()

    def test_resume_rebuilds_transcript(self, schedule_store, prefs, make_task, fake_chat):
        asyncio.run(_neg(schedule_store, fake_chat).generate([make_task()], prefs))

        fresh = _neg(schedule_store, fake_chat)
        assert fresh.transcript == []
        fresh.resume()
        assert [(t.role, t.text) for t in fresh.transcript] == [("assistant", SCHEDULE_TEXT)]


# ============================================================
# local plans
# ============================================================


class TestLocalPlan:
    def _local(self, store, chat, make_task, prefs):
        neg = _neg(store, chat)
        neg.adopt_local(plan_day([make_task("Old task", minutes=30)], prefs))
        return neg

    def test_adopt_local_saves_and_seeds_transcript(self, schedule_store, prefs, make_task, fake_chat):
        neg = self._local(schedule_store, fake_chat, make_task, prefs)

        stored = schedule_store.load(DAY)
        assert [b.title for b in stored.items] == ["Wake up & breakfast", "Old task", "Take a break ☕"]
        assert stored.content is None
        [turn] = neg.transcript
        assert turn.role == "assistant"
        assert turn.text.splitlines()[1] == "⏰ 09:00 - 09:30 | Old task"

    def test_adopt_local_replaces_generated_conversation(self, schedule_store, prefs, make_task, fake_chat):
        neg = _neg(schedule_store, fake_chat)
        asyncio.run(neg.generate([make_task()], prefs))
        asyncio.run(neg.revise("Start later", prefs))

        neg.adopt_local(plan_day([make_task("Old task", minutes=30)], prefs))
        assert len(neg.transcript) == 1
        assert SCHEDULE_TEXT not in neg.transcript[0].text

    def test_revision_replaces_local_items(self, schedule_store, prefs, make_task):
        chat = FakeChat(replies=["⏰ 10:00 - 10:45 | New task"])
        neg = self._local(schedule_store, chat, make_task, prefs)

        rev = asyncio.run(neg.revise("Do something else", prefs))
        assert rev.schedule_updated is True

        stored = schedule_store.load(DAY)
        assert stored.items == []
        assert [b.title for b in blocks_for_schedule(stored)] == ["New task"]
        assert "Old task" in chat.calls[0]["turns"][0].text

    def test_resume_seeds_from_local_items(self, schedule_store, prefs, make_task, fake_chat):
        self._local(schedule_store, fake_chat, make_task, prefs)

        fresh = _neg(schedule_store, fake_chat)
        fresh.resume()
        [turn] = fresh.transcript
        assert "⏰ 09:00 - 09:30 | Old task" in turn.text

        asyncio.run(fresh.revise("Shorter please", prefs))
        assert "Old task" in fake_chat.calls[-1]["turns"][0].text
