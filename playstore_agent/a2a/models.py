"""
A2A / JSON-RPC 2.0 protocol models.

Inbound messages are validated leniently (unknown part kinds and extra keys are
kept so they can be echoed back in the task history). Outbound task results are
serialized with the protocol's camelCase keys.
"""

import json
from enum import IntEnum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

JSONRPC_VERSION = "2.0"


class JsonRpcErrorCode(IntEnum):
    INVALID_REQUEST = -32600
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Part(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow", frozen=True)

    kind: str = "text"
    text: Optional[str] = None
    data: Any = None

    def as_text(self) -> str:
        if self.kind == "text":
            return self.text or ""
        if self.kind == "data":
            return json_text(self.data)
        return ""


class ProtocolMessage(_CamelModel):
    """Inbound A2A message. Immutable once parsed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow", frozen=True)

    role: Literal["user", "agent"] = "user"
    parts: List[Part] = []
    message_id: Optional[str] = None
    task_id: Optional[str] = None
    kind: str = "message"

    @field_validator("role", "parts", mode="before")
    @classmethod
    def _null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return "user" if info.field_name == "role" else []
        return value

    def flatten(self) -> str:
        return "\n".join(part.as_text() for part in self.parts)

    def raw_parts(self) -> List[Dict[str, Any]]:
        # echo exactly what the caller sent
        return [part.model_dump(by_alias=True, exclude_unset=True) for part in self.parts]


class TextPart(_CamelModel):
    kind: Literal["text"] = "text"
    text: str


class HistoryMessage(_CamelModel):
    kind: Literal["message"] = "message"
    role: Literal["user", "agent"]
    parts: List[Dict[str, Any]]
    message_id: str
    task_id: str


class StatusMessage(_CamelModel):
    message_id: str
    role: Literal["agent"] = "agent"
    parts: List[TextPart]
    kind: Literal["message"] = "message"


class TaskStatus(_CamelModel):
    state: Literal["completed"] = "completed"
    timestamp: str
    message: StatusMessage


class Artifact(_CamelModel):
    artifact_id: str
    name: str
    parts: List[TextPart]


class TaskResult(_CamelModel):
    id: str
    context_id: str
    status: TaskStatus
    artifacts: List[Artifact] = []
    history: List[HistoryMessage] = []
    kind: Literal["task"] = "task"

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Dict[str, Any]] = Field(None, description="Additional error data")

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)


def json_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
