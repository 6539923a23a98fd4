"""
Agent LLM: OpenAI (primary) or Hugging Face (fallback).

chat() takes role-tagged messages and returns the raw response content, which
may be one text block or a list of fragments. extract_text() is the single
place that turns either shape into one string.
"""

import logging
from typing import Any, Callable

import httpx
from openai import OpenAI

from evidence_agent.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from evidence_agent.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

# messages -> response content (str or list of fragments)
ChatModel = Callable[[list[dict[str, str]]], Any]


def extract_text(content: Any) -> str:
    """
    Normalize a model response payload to one string. Accepts a string, a list
    of fragments (strings, {"text": ...} dicts or objects with .text), or None.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        parts: list[str] = []
        for fragment in content:
            if isinstance(fragment, str):
                parts.append(fragment)
            elif isinstance(fragment, dict):
                parts.append(str(fragment.get("text") or ""))
            elif getattr(fragment, "text", None):
                parts.append(str(fragment.text))
        return "".join(parts)
    text = getattr(content, "text", None)
    return str(text) if text is not None else str(content)


def _call_openai(messages: list[dict[str, str]], max_tokens: int) -> Any:
    """Call OpenAI chat completions. Returns message content."""
    client = OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)
    response = client.chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=messages,
        temperature=LLM_TEMPERATURE,
        max_tokens=max_tokens,
    )
    msg = response.choices[0].message if response.choices else None
    content = getattr(msg, "content", None) if msg else None
    logger.info("[llm:openai] OUT response_len=%d", len(extract_text(content)))
    return content


def _call_hf(messages: list[dict[str, str]], max_tokens: int) -> Any:
    """Call Hugging Face router chat completions. Raises on HTTP errors."""
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {
        "model": HF_LLM_MODEL,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": LLM_TEMPERATURE,
    }
    with httpx.Client(timeout=LLM_API_TIMEOUT) as client:
        response = client.post(HF_CHAT_URL, json=payload, headers=headers)
    response.raise_for_status()
    data = response.json()
    choices = data.get("choices") or []
    content = (choices[0].get("message") or {}).get("content") if choices else None
    logger.info("[llm:hf] OUT response_len=%d", len(extract_text(content)))
    return content


def chat(messages: list[dict[str, str]], max_tokens: int = LLM_MAX_TOKENS) -> Any:
    """
    Send messages to the configured model. Uses OpenAI when OPENAI_API_KEY is
    set; if OpenAI returns empty content and HF_API_KEY is set, falls back to HF.
    Provider errors propagate to the caller; nothing is retried here.
    """
    logger.info("[llm] IN  messages=%d roles=%s", len(messages), [m.get("role") for m in messages])
    if OPENAI_API_KEY:
        content = _call_openai(messages, max_tokens)
        if extract_text(content).strip() or not HF_API_KEY:
            return content
        logger.info("[llm] OpenAI returned empty; falling back to Hugging Face")
    if HF_API_KEY:
        return _call_hf(messages, max_tokens)
    raise ServiceUnavailableError("llm", "set OPENAI_API_KEY or HF_API_KEY in .env")
