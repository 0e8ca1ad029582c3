"""
A2A protocol adapter.
What it does:
- Parses and validates the JSON-RPC 2.0 envelope
- Resolves the target agent from the injected registry
- Flattens A2A messages into {role, content} messages for the agent
- Assembles the completed task (artifacts + history) or a JSON-RPC error

And, the main purpose:
Terminate inbound A2A requests and never let an exception escape as a raw error.
"""


import json
import traceback
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import ValidationError

from playstore_agent.a2a.models import (
    JSONRPC_VERSION,
    Artifact,
    HistoryMessage,
    JsonRpcError,
    JsonRpcErrorCode,
    ProtocolMessage,
    StatusMessage,
    TaskResult,
    TaskStatus,
    TextPart,
    json_text,
)
from playstore_agent.agent.registry import AgentRegistry
from playstore_agent.core.clock import utc_now_iso
from playstore_agent.core.ids import new_uuid
from playstore_agent.core.logging import get_logger

log = get_logger("a2a")

READY_TEXT = "Ready to receive requests"


@dataclass(frozen=True)
class TaskOutcome:
    request_id: Any
    task: TaskResult
    http_status: int = 200

    def to_http(self) -> tuple[int, dict]:
        return self.http_status, {"jsonrpc": JSONRPC_VERSION, "id": self.request_id, "result": self.task.to_wire()}


@dataclass(frozen=True)
class ErrorOutcome:
    request_id: Any
    error: JsonRpcError
    http_status: int

    def to_http(self) -> tuple[int, dict]:
        return self.http_status, {"jsonrpc": JSONRPC_VERSION, "id": self.request_id, "error": self.error.to_wire()}


Outcome = Union[TaskOutcome, ErrorOutcome]


def _error(request_id: Any, http_status: int, code: JsonRpcErrorCode, message: str, data: Optional[dict] = None) -> ErrorOutcome:
    return ErrorOutcome(
        request_id=request_id,
        error=JsonRpcError(code=int(code), message=message, data=data),
        http_status=http_status,
    )


def _text_parts(text: str) -> list[TextPart]:
    return [TextPart(text=text)]


def _status(text: str) -> TaskStatus:
    return TaskStatus(
        timestamp=utc_now_iso(),
        message=StatusMessage(message_id=new_uuid(), parts=_text_parts(text)),
    )


def ready_task() -> TaskResult:
    return TaskResult(id=new_uuid(), context_id=new_uuid(), status=_status(READY_TEXT))


def to_agent_messages(messages: list[ProtocolMessage]) -> list[dict]:
    return [{"role": m.role, "content": m.flatten()} for m in messages]


class A2AAdapter:
    def __init__(self, registry: AgentRegistry, *, expose_stack: bool = False):
        self.registry = registry
        self.expose_stack = expose_stack

    async def handle(self, raw: Union[bytes, str, None], agent_id: str) -> tuple[int, dict]:
        """Returns (http_status, json_body). Never raises."""
        log.info(f"Received request for agent: {agent_id}")
        try:
            outcome = await self._dispatch(raw, agent_id)
        except Exception as e:
            log.error(f"Internal error: {e}", exc_info=True)
            data: dict[str, Any] = {"details": str(e)}
            if self.expose_stack:
                data["stack"] = traceback.format_exc()
            outcome = _error(None, 500, JsonRpcErrorCode.INTERNAL_ERROR, "Internal error", data)
        return outcome.to_http()

    def _parse_body(self, raw: Union[bytes, str, None]) -> Any:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning(f"JSON parse error: {e}")
            return None

    def _validate_envelope(self, body: Any, agent_id: str) -> Union[ErrorOutcome, list[ProtocolMessage]]:
        if not isinstance(body, dict):
            log.error(f"Invalid request body type: {type(body).__name__}")
            return _error(None, 400, JsonRpcErrorCode.INVALID_REQUEST, 'Invalid Request: jsonrpc must be "2.0"')

        request_id = body.get("id")
        if body.get("jsonrpc") != JSONRPC_VERSION:
            log.error(f"Invalid jsonrpc version: {body.get('jsonrpc')!r}")
            return _error(request_id, 400, JsonRpcErrorCode.INVALID_REQUEST, 'Invalid Request: jsonrpc must be "2.0"')

        if request_id is None:
            log.error("Missing request id")
            return _error(None, 400, JsonRpcErrorCode.INVALID_REQUEST, "Invalid Request: id is required")

        if agent_id not in self.registry:
            available = self.registry.names()
            log.error(f"Agent not found: {agent_id}. Available agents: {available}")
            return _error(
                request_id,
                404,
                JsonRpcErrorCode.INVALID_PARAMS,
                f"Agent '{agent_id}' not found",
                {"availableAgents": available, "requestedAgent": agent_id},
            )

        params = body.get("params") if isinstance(body.get("params"), dict) else {}
        message, messages = params.get("message"), params.get("messages")
        if message is not None:
            raw_messages = [message]
        elif isinstance(messages, list) and messages:
            raw_messages = messages
        else:
            log.error("No messages provided in params")
            return _error(request_id, 400, JsonRpcErrorCode.INVALID_PARAMS, "Invalid params: message or messages required")

        try:
            return [ProtocolMessage.model_validate(m) for m in raw_messages]
        except ValidationError as e:
            log.error(f"Invalid message in params: {e.error_count()} error(s)")
            return _error(
                request_id,
                400,
                JsonRpcErrorCode.INVALID_PARAMS,
                "Invalid params: malformed message",
                {"errors": json.loads(e.json(include_url=False, include_input=False))},
            )

    async def _dispatch(self, raw: Union[bytes, str, None], agent_id: str) -> Outcome:
        body = self._parse_body(raw)
        if body is None:
            # empty / unparseable bodies are treated as keep-alives
            return TaskOutcome(request_id=None, task=ready_task())

        validated = self._validate_envelope(body, agent_id)
        if isinstance(validated, ErrorOutcome):
            return validated
        messages = validated

        request_id = body["id"]
        params = body.get("params") if isinstance(body.get("params"), dict) else {}
        context_id = str(params.get("contextId") or new_uuid())
        task_id = str(params["taskId"]) if params.get("taskId") else new_uuid()

        agent = self.registry.get(agent_id)
        agent_messages = to_agent_messages(messages)
        log.info(f"Executing agent '{agent_id}' with {len(agent_messages)} message(s)")
        response = await agent.generate(agent_messages)
        agent_text = response.text or ""
        log.info(f"Agent '{agent_id}' responded ({len(agent_text)} chars, {len(response.tool_results)} tool result(s))")

        return TaskOutcome(
            request_id=request_id,
            task=self._build_task(agent_id, messages, agent_text, response.tool_results, task_id, context_id),
        )

    def _build_task(
        self,
        agent_id: str,
        messages: list[ProtocolMessage],
        agent_text: str,
        tool_results: list[Any],
        task_id: str,
        context_id: str,
    ) -> TaskResult:
        artifacts = [Artifact(artifact_id=new_uuid(), name=f"{agent_id}Response", parts=_text_parts(agent_text))]
        if tool_results:
            artifacts.append(
                Artifact(
                    artifact_id=new_uuid(),
                    name="ToolResults",
                    parts=[TextPart(text=json_text(result)) for result in tool_results],
                )
            )

        history = [
            HistoryMessage(
                role=m.role,
                parts=m.raw_parts(),
                message_id=m.message_id or new_uuid(),
                task_id=m.task_id or task_id,
            )
            for m in messages
        ]
        history.append(
            HistoryMessage(
                role="agent",
                parts=[p.model_dump(by_alias=True) for p in _text_parts(agent_text)],
                message_id=new_uuid(),
                task_id=task_id,
            )
        )

        return TaskResult(
            id=task_id,
            context_id=context_id,
            status=_status(agent_text),
            artifacts=artifacts,
            history=history,
        )
