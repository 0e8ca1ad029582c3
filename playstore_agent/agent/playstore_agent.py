"""
Play Store rating agent.
What it does:
- Prepends the agent instructions to the conversation
- Lets the model call registered tools (rating lookup, scorer) for a few rounds
- Feeds tool results (or tool errors) back to the model
- Returns the final text and every tool result it produced

And, the main purpose:
The conversational capability served over the A2A endpoint.
"""


import inspect
import json
from typing import Any, Awaitable, Callable, Optional

from playstore_agent.core.config import settings
from playstore_agent.core.logging import get_logger
from playstore_agent.llm import router
from playstore_agent.llm.json_parse import parse_tool_arguments
from playstore_agent.llm.prompts import AGENT_INSTRUCTIONS
from playstore_agent.llm.schemas import AgentResponse
from playstore_agent.tools.registry import get_tool, tool_specs
import playstore_agent.tools.playstore  # noqa: F401
import playstore_agent.tools.scorer  # noqa: F401

log = get_logger("agent.playstore")

DEFAULT_TOOLS = ["get-playstore-rating", "score-app-rating"]

ChatFn = Callable[[list[dict], Optional[list[dict]]], Awaitable[dict]]

_LLM_ROLES = {"agent": "assistant", "assistant": "assistant", "user": "user"}


def _clean_args_for_tool(tool: Callable[..., Any], args: dict) -> dict:
    try:
        sig = inspect.signature(tool)
    except (TypeError, ValueError):
        return args
    if any(p.kind == inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values()):
        return args

    clean = {k: v for k, v in args.items() if k in sig.parameters}
    dropped = set(args.keys()) - set(clean.keys())
    if dropped:
        log.warning(f"Dropping invalid tool args: {dropped}")
    return clean


class PlayStoreAgent:
    name = "PlayStore Rating Agent"

    def __init__(
        self,
        *,
        chat: ChatFn | None = None,
        tools: dict[str, Callable[..., Any]] | None = None,
        instructions: str = AGENT_INSTRUCTIONS,
        max_tool_rounds: int | None = None,
    ):
        self.chat = chat or router.chat
        self.tools = tools if tools is not None else {n: get_tool(n) for n in DEFAULT_TOOLS}
        self.instructions = instructions
        rounds = settings.AGENT_MAX_TOOL_ROUNDS if max_tool_rounds is None else max_tool_rounds
        self.max_tool_rounds = max(0, rounds)

    def _tool_specs(self) -> list[dict]:
        specs = tool_specs(list(self.tools.keys()))
        known = {s["function"]["name"] for s in specs}
        # injected tools that were never registered still get a bare definition
        for name in self.tools:
            if name not in known:
                specs.append({"type": "function", "function": {"name": name, "parameters": {"type": "object", "properties": {}}}})
        return specs

    async def _run_tool_call(self, call: dict) -> dict:
        fn = call.get("function") or {}
        name = fn.get("name") or ""
        args = parse_tool_arguments(fn.get("arguments"))
        call_id = call.get("id") or ""

        tool = self.tools.get(name)
        if tool is None:
            log.warning(f"Model requested unknown tool '{name}'")
            result: Any = {"error": f"Unknown tool: {name}. Known: {list(self.tools.keys())}"}
        else:
            try:
                result = await tool(**_clean_args_for_tool(tool, args))
            except Exception as e:
                log.warning(f"Tool '{name}' failed: {e}")
                result = {"error": str(e)}

        return {"toolCallId": call_id, "toolName": name, "args": args, "result": result}

    async def generate(self, messages: list[dict]) -> AgentResponse:
        convo: list[dict] = [{"role": "system", "content": self.instructions}]
        for m in messages:
            convo.append({"role": _LLM_ROLES.get(m.get("role") or "user", "user"), "content": m.get("content") or ""})

        specs = self._tool_specs() if self.tools else None
        tool_results: list[dict] = []

        for round_no in range(self.max_tool_rounds + 1):
            # last round goes without tools so the model has to answer
            offer_tools = specs if round_no < self.max_tool_rounds else None
            reply = await self.chat(convo, offer_tools)
            calls = reply.get("tool_calls") or []
            if not calls or offer_tools is None:
                return AgentResponse(text=reply.get("content") or "", tool_results=tool_results)

            convo.append({"role": "assistant", "content": reply.get("content") or "", "tool_calls": calls})
            for call in calls:
                outcome = await self._run_tool_call(call)
                tool_results.append(outcome)
                convo.append({
                    "role": "tool",
                    "tool_call_id": outcome["toolCallId"],
                    "content": json.dumps(outcome["result"], ensure_ascii=False, default=str),
                })
