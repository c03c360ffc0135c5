# Keyword replies for chat when no text-generation credential is configured

import random
from typing import List

from lifeflow_main.models.models_schedule import Task, UserPreferences

PLAN_WORDS = ("plan", "schedule", "arrange")
TIRED_WORDS = ("tired", "exhausted", "worn out")
STRESS_WORDS = ("anxious", "stress", "overwhelmed")
SLEEP_WORDS = ("sleep", "insomnia")
THANKS_WORDS = ("thank", "thx")

GENERIC_REPLIES = [
    "I'm listening~ what would you like to talk about?",
    "Mm-hm, go on~",
    "I see. Is there anything else I can help with?",
    "Got it, noted. Want me to help with anything?",
]


def _has(msg: str, words) -> bool:
    return any(w in msg for w in words)


def offline_reply(message: str, tasks: List[Task], prefs: UserPreferences) -> str:
    msg = message.lower()

    if _has(msg, PLAN_WORDS):
        pending = [t for t in tasks if not t.completed]
        if not pending:
            return ("You don't have any pending tasks right now~ "
                    "Add a few first and I'll help you arrange them 😊")
        lines = "\n".join(f"• {t.title} (about {t.estimated_minutes} min)" for t in pending[:5])
        return (
            f"Okay, let me look at your tasks...\n\nHere's what's waiting:\n{lines}\n\n"
            f"My suggestions:\n"
            f"1. Take a {prefs.break_minutes} minute break after each task\n"
            f"2. Keep each focus session under {prefs.max_focus_minutes} minutes\n"
            f"3. Walk around and drink some water in between\n\n"
            f"Does that sound okay? Tell me anytime if you want changes~ 💪"
        )

    if _has(msg, TIRED_WORDS):
        return ("Sounds like you're a bit tired... that's completely normal, no need to push 💙\n\n"
                "Maybe rest for a moment:\n• Close your eyes and breathe deeply\n"
                "• Listen to some music you like\n• Step outside for some air\n\n"
                "We can pick things up again when you're ready~")

    if _has(msg, STRESS_WORDS):
        return ("I understand, feeling pressure is normal 🤗\n\nTry this:\n"
                "1. Break big tasks into small steps\n2. Start with the easiest one\n"
                "3. Give yourself a small reward after each\n\n"
                "You don't have to finish everything at once. Step by step, you're doing great ✨")

    if _has(msg, SLEEP_WORDS):
        return (f"According to your settings you usually go to bed at {prefs.bed_time}.\n\n"
                "Good sleep matters~ an hour before bed, try to:\n• Put the phone away\n"
                "• Dim the lights\n• Listen to soft music or white noise\n\nGood night 🌙")

    if _has(msg, THANKS_WORDS):
        return "You're welcome~ I'm here whenever you need me 😊"

    return random.choice(GENERIC_REPLIES)
