# Minimal CLI for LifeFlow tasks + local planner + schedule negotiation

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

from core.errors import LifeFlowError
from core.negotiator import ScheduleNegotiator
from core.offline import offline_reply
from core.state import AppState
from lifeflow_calendar.export import blocks_for_schedule, export_filename, export_ics
from lifeflow_main.main_agents.kv_store import KeyValueStore
from lifeflow_main.main_agents.schedule_store import ScheduleStore
from lifeflow_main.models.models_schedule import DaySchedule
from planning.daily_planner import plan_day, summarize_plan
from utils.config import CONFIG
from utils.debug import configure_logging, debug_log


def _open():
    kv = KeyValueStore()
    state = AppState(kv).init()
    store = ScheduleStore(kv)
    neg = ScheduleNegotiator(store, api_key=CONFIG["llm"]["api_key"])
    neg.resume()
    debug_log(f"State initialized: {len(state.tasks)} task(s), schedule day {neg.day}")
    return state, store, neg


def _print_blocks(blocks):
    for b in blocks:
        print(f"- {b.start}–{b.end}: {b.title} ({b.kind})")


def _print_schedule(schedule: DaySchedule):
    flag = "confirmed" if schedule.confirmed else "not confirmed yet"
    print(f"=== Schedule for {schedule.date.isoformat()} ({flag}) ===")
    if schedule.items:
        _print_blocks(schedule.items)
    if schedule.content:
        print(schedule.content)


def cmd_add(args):
    state, _, _ = _open()
    t = state.add_task(args.title, args.minutes, priority=args.priority,
                       deadline=date.fromisoformat(args.deadline) if args.deadline else None)
    print(f"Added: {t.title} ({t.estimated_minutes} min) [{t.priority}] (id={t.id})")


def cmd_tasks(args):
    state, _, _ = _open()
    for t in state.tasks:
        if t.completed and not args.all:
            continue
        due = f" due {t.deadline.isoformat()}" if t.deadline else ""
        mark = "x" if t.completed else " "
        print(f"[{mark}] {t.title} [{t.priority}] {t.estimated_minutes}m{due} id={t.id}")


def cmd_done(args):
    state, _, _ = _open()
    t = state.toggle_complete(args.id)
    if t is None:
        print(f"No task with id {args.id}")
        return 1
    print(f"{t.title}: {'done' if t.completed else 'reopened'}")


def cmd_settings(args):
    state, _, _ = _open()
    prefs = state.update_preferences(
        wake_time=args.wake, bed_time=args.bed, max_focus_minutes=args.focus,
        break_minutes=args.break_minutes, personal_notes=args.notes, api_key=args.api_key,
    )
    shown = prefs.model_dump(exclude={"api_key"})
    shown["api_key"] = "set" if prefs.api_key else "not set"
    for k, v in shown.items():
        print(f"{k}: {v}")


def cmd_plan(_args):
    state, _, neg = _open()
    snap = state.snapshot()
    if not snap.pending:
        print("No pending tasks. Add a few first (lifeflow add ...).")
        return 1
    blocks = plan_day(list(snap.pending), snap.preferences)
    neg.adopt_local(blocks)
    print("=== Plan ===")
    _print_blocks(blocks)
    summary = summarize_plan(blocks)
    print(f"\n[Info] {summary['minutes']['task']}m focus, {summary['minutes']['break']}m breaks, "
          f"day ends {summary['end']}")


def cmd_generate(_args):
    state, _, neg = _open()
    snap = state.snapshot()
    schedule = asyncio.run(neg.generate(list(snap.pending), snap.preferences))
    _print_schedule(schedule)


def cmd_revise(args):
    state, _, neg = _open()
    rev = asyncio.run(neg.revise(args.message, state.snapshot().preferences))
    print(rev.reply)
    if rev.schedule_updated:
        print("\n[Info] Schedule updated (confirm it with: lifeflow confirm)")


def cmd_chat(_args):
    """Interactive revision loop; falls back to offline replies without an API key."""
    state, _, neg = _open()
    snap = state.snapshot()
    online = bool(snap.preferences.api_key or neg.api_key)
    if not online:
        print("(offline mode: no API key configured)")
    print("Type 'quit' to leave.")
    while True:
        try:
            msg = input("> ").strip()
        except EOFError:
            break
        if msg.lower() in ("quit", "exit"):
            break
        if not msg:
            continue
        if online:
            rev = asyncio.run(neg.revise(msg, snap.preferences))
            print(rev.reply)
        else:
            print(offline_reply(msg, list(snap.pending), snap.preferences))


def cmd_confirm(_args):
    _, _, neg = _open()
    _print_schedule(neg.confirm())


def cmd_clear(_args):
    _, _, neg = _open()
    neg.clear()
    print("Cleared today's schedule.")


def cmd_show(_args):
    _, store, neg = _open()
    schedule = store.load(neg.day)
    if schedule is None:
        print("No schedule yet for today.")
        return
    _print_schedule(schedule)


def cmd_export(args):
    _, store, neg = _open()
    schedule = store.load(neg.day)
    if schedule is None:
        print("No schedule yet for today.")
        return 1
    out = Path(args.out or export_filename(neg.day))
    out.write_text(export_ics(blocks_for_schedule(schedule), neg.day), encoding="utf-8")
    print(f"Wrote {out}")


def main(argv=None):
    p = argparse.ArgumentParser(description="LifeFlow CLI")
    sub = p.add_subparsers(required=True)

    sp = sub.add_parser("add", help="Add a task")
    sp.add_argument("title")
    sp.add_argument("minutes", type=int, help="Estimated minutes")
    sp.add_argument("--priority", default="medium", choices=["low", "medium", "high"])
    sp.add_argument("--deadline", help="YYYY-MM-DD")
    sp.set_defaults(func=cmd_add)

    sp = sub.add_parser("tasks", help="List pending tasks")
    sp.add_argument("--all", action="store_true", help="Include completed tasks")
    sp.set_defaults(func=cmd_tasks)

    sp = sub.add_parser("done", help="Toggle a task's completion")
    sp.add_argument("id")
    sp.set_defaults(func=cmd_done)

    sp = sub.add_parser("settings", help="Show or update preferences")
    sp.add_argument("--wake", help="HH:MM")
    sp.add_argument("--bed", help="HH:MM")
    sp.add_argument("--focus", type=int, help="Longest focus session (minutes)")
    sp.add_argument("--break-minutes", type=int)
    sp.add_argument("--notes", help="Personal notes for the assistant")
    sp.add_argument("--api-key")
    sp.set_defaults(func=cmd_settings)

    sp = sub.add_parser("plan", help="Build today's plan locally (no API)")
    sp.set_defaults(func=cmd_plan)

    sp = sub.add_parser("generate", help="Ask the assistant for today's plan")
    sp.set_defaults(func=cmd_generate)

    sp = sub.add_parser("revise", help="Send one revision message")
    sp.add_argument("message")
    sp.set_defaults(func=cmd_revise)

    sp = sub.add_parser("chat", help="Talk the plan through interactively")
    sp.set_defaults(func=cmd_chat)

    sp = sub.add_parser("confirm", help="Confirm today's schedule")
    sp.set_defaults(func=cmd_confirm)

    sp = sub.add_parser("clear", help="Delete today's schedule and conversation")
    sp.set_defaults(func=cmd_clear)

    sp = sub.add_parser("show", help="Show today's schedule")
    sp.set_defaults(func=cmd_show)

    sp = sub.add_parser("export", help="Export today's schedule to .ics")
    sp.add_argument("--out", help="Output path (default schedule-YYYY-MM-DD.ics)")
    sp.set_defaults(func=cmd_export)

    args = p.parse_args(argv)
    configure_logging()
    try:
        return args.func(args) or 0
    except LifeFlowError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
