import json
from typing import Any, Dict, List


def parse_todos(raw: str) -> List[Dict[str, Any]]:
    """
    Decode a stored to-do string into [{"text": str, "done": bool}, ...].

    Older rows hold plain text instead of JSON: a comma-separated string
    becomes one open to-do per part, anything else a single open to-do.
    """
    if not raw or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        data = None

    if isinstance(data, list):
        todos = []
        for entry in data:
            if isinstance(entry, dict):
                todos.append({"text": str(entry.get("text") or ""), "done": bool(entry.get("done"))})
            elif isinstance(entry, str):
                todos.append({"text": entry, "done": False})
        return todos

    if "," in raw:
        return [{"text": part.strip(), "done": False} for part in raw.split(",")]
    return [{"text": raw.strip(), "done": False}]


def serialize_todos(todos: List[Dict[str, Any]]) -> str:
    if not todos:
        return ""
    return json.dumps(
        [{"text": str(t.get("text") or ""), "done": bool(t.get("done"))} for t in todos],
        ensure_ascii=False,
    )


def has_open_todos(raw: str) -> bool:
    return any(not t["done"] and t["text"].strip() for t in parse_todos(raw))


def set_todo_done(raw: str, index: int, done=None) -> str:
    """Set (or flip, when ``done`` is None) one entry's flag; text is untouched."""
    todos = parse_todos(raw)
    if index < 0 or index >= len(todos):
        raise IndexError(index)
    todos[index]["done"] = (not todos[index]["done"]) if done is None else bool(done)
    return serialize_todos(todos)
