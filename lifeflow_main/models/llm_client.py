# llm_client.py
from __future__ import annotations
from typing import List, Optional
import logging

from openai import AsyncOpenAI, OpenAIError

from core.errors import TransportError
from lifeflow_main.models.models_schedule import Turn
from utils.config import CONFIG

logger = logging.getLogger(__name__)


def to_messages(turns: List[Turn], system_prompt: Optional[str] = None) -> List[dict]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.extend({"role": t.role, "content": t.text} for t in turns)
    return messages


async def chat(api_key: str, turns: List[Turn], system_prompt: Optional[str] = None) -> str:
    """
    Send role-tagged turns (plus optional system framing) and return one text reply.
    Transport/service failures are raised as TransportError; an empty payload is
    replaced with the fallback reply.
    """
    cfg = CONFIG["llm"]
    messages = to_messages(turns, system_prompt)
    logger.debug("chat request: %d message(s) to %s", len(messages), cfg["model"])

    client = AsyncOpenAI(api_key=api_key, timeout=cfg["timeout_s"])
    try:
        resp = await client.chat.completions.create(
            model=cfg["model"],
            messages=messages,
            temperature=cfg["temperature"],
            max_tokens=cfg["max_tokens"],
        )
    except OpenAIError as e:
        raise TransportError(str(e)) from e
    finally:
        await client.close()

    try:
        text = resp.choices[0].message.content if resp.choices else None
    except (AttributeError, TypeError) as e:
        raise TransportError(f"Malformed chat response: {e}") from e
    if not text or not text.strip():
        return CONFIG["negotiation"]["fallback_reply"]
    return text.strip()
