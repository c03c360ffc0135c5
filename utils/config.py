# Config flags and runtime settings

import os

from dotenv import load_dotenv

load_dotenv()


CONFIG = {
    "debug_mode": os.getenv("LIFEFLOW_DEBUG", "0") == "1",

    # Durable store (SQLAlchemy) + fast JSON mirror for provisional reads
    "storage": {
        "database_url": os.getenv("DATABASE_URL", "sqlite:///./lifeflow.db"),
        "mirror_path": os.getenv("LIFEFLOW_MIRROR_PATH", "data/lifeflow_cache.json"),
        "prefix": "lifeflow_",
    },

    # Text generation (OpenAI chat completions)
    "llm": {
        "api_key": os.getenv("OPENAI_API_KEY"),
        "model": os.getenv("LIFEFLOW_MODEL", "gpt-4o-mini"),
        "temperature": 0.7,
        "max_tokens": 2048,
        "timeout_s": float(os.getenv("LIFEFLOW_LLM_TIMEOUT", "30")),
    },

    "negotiation": {
        "history_turns": 10,
        "fallback_reply": "Sorry, I couldn't quite follow that... could you say it another way?",
        "apology_prefix": "Sorry, something went wrong on my side",
    },

    "export": {
        "prodid": "-//LifeFlow//Schedule//EN",
        "uid_prefix": "lifeflow",
    },

    # Used until the user saves their own settings
    "default_preferences": {
        "wake_time": "08:00",
        "bed_time": "23:00",
        "max_focus_minutes": 45,
        "break_minutes": 15,
        "personal_notes": "",
    },
}
