"""
LLM call wrapper and it does:
- Sends chat messages (plus tool definitions) to the model provider
- Returns the assistant message, including any tool calls
- Retries transient provider errors

Main purpose:
Central interface for all model calls.
"""


import asyncio
import httpx

from playstore_agent.core.config import settings
from playstore_agent.core.logging import get_logger

log = get_logger("llm.router")

TRANSIENT_STATUS = (429, 500, 502, 503, 504)
MAX_ATTEMPTS = 3


class LLMError(RuntimeError):
    pass


def _safe_snippet(text: str, n: int = 400) -> str:
    return (text or "")[:n].replace("\n", "\\n").replace("\r", "\\r")


async def _groq_chat(messages: list[dict], tools: list[dict] | None = None) -> dict:
    if not settings.GROQ_API_KEY:
        raise LLMError("Missing GROQ_API_KEY. Put it in your .env")

    url = f"{settings.GROQ_BASE_URL.rstrip('/')}/chat/completions"
    headers = {"Authorization": f"Bearer {settings.GROQ_API_KEY}"}
    payload = {
        "model": settings.LLM_MODEL,
        "messages": messages,
        "temperature": 0.2,
    }
    if tools:
        payload["tools"] = tools
        payload["tool_choice"] = "auto"

    timeout = httpx.Timeout(40.0, connect=10.0)

    last_err: Exception | None = None
    for attempt in range(MAX_ATTEMPTS):
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                r = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            last_err = e
            backoff = 0.6 * (2**attempt)
            log.warning(f"Groq call failed: {e}. retrying in {backoff:.1f}s (attempt {attempt+1}/{MAX_ATTEMPTS})")
            await asyncio.sleep(backoff)
            continue

        # Retry transient errors
        if r.status_code in TRANSIENT_STATUS:
            msg = f"Groq transient {r.status_code}: {_safe_snippet(r.text)}"
            last_err = LLMError(msg)
            backoff = 0.6 * (2**attempt)
            log.warning(f"{msg}. retrying in {backoff:.1f}s (attempt {attempt+1}/{MAX_ATTEMPTS})")
            await asyncio.sleep(backoff)
            continue

        if r.status_code >= 400:
            raise LLMError(f"Groq error {r.status_code}: {_safe_snippet(r.text)}")

        data = r.json()
        try:
            return data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError):
            raise LLMError(f"Unexpected Groq response: {_safe_snippet(str(data))}")

    raise LLMError(f"Groq call failed after retries: {last_err}")


def _mock_reply(messages: list[dict]) -> dict:
    last_user = next((m.get("content") or "" for m in reversed(messages) if m.get("role") == "user"), "")
    if not last_user.strip():
        return {"role": "assistant", "content": "Which app would you like me to look up on the Play Store?"}
    return {"role": "assistant", "content": f"Mock agent received: {last_user}"}


async def chat(messages: list[dict], tools: list[dict] | None = None) -> dict:
    """
    One chat completion round. Returns the assistant message dict
    ({"role", "content", "tool_calls"?}) in OpenAI format.
    """
    provider = (settings.LLM_PROVIDER or "").lower().strip()

    if provider == "mock":
        return _mock_reply(messages)

    if provider != "groq":
        raise LLMError(f"Unsupported LLM_PROVIDER={settings.LLM_PROVIDER}. Use groq or mock.")

    return await _groq_chat(messages, tools)
