import uuid

def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"

def new_uuid() -> str:
    return str(uuid.uuid4())

"""
ID generation utilities & it provides:
- Prefixed row IDs (runs, events, history entries)
- Plain UUIDs for protocol tasks, contexts, messages and artifacts

The main purpose:
Consistent identifier creation across system.
"""
