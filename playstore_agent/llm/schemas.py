from typing import Any, Dict, List

from pydantic import BaseModel


class AgentResponse(BaseModel):
    """What an agent hands back to the A2A adapter: final text plus every tool result."""

    text: str = ""
    tool_results: List[Dict[str, Any]] = []
