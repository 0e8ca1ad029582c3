from typing import Callable, Any

TOOLS: dict[str, Callable[..., Any]] = {}
TOOL_SPECS: dict[str, dict] = {}

def register(name: str, description: str = "", parameters: dict | None = None):
    def deco(fn: Callable[..., Any]):
        TOOLS[name] = fn
        TOOL_SPECS[name] = {
            "type": "function",
            "function": {
                "name": name,
                "description": description,
                "parameters": parameters or {"type": "object", "properties": {}},
            },
        }
        return fn
    return deco

def get_tool(name: str):
    if name not in TOOLS:
        raise KeyError(f"Unknown tool: {name}. Known: {list(TOOLS.keys())}")
    return TOOLS[name]

def tool_specs(names: list[str] | None = None) -> list[dict]:
    """OpenAI-style function definitions for the given (or all) registered tools."""
    selected = names if names is not None else list(TOOL_SPECS.keys())
    return [TOOL_SPECS[n] for n in selected if n in TOOL_SPECS]
