from typing import Any

from roadboard.models.feedback import DEVICES, FEEDBACK_TYPES, KINDS, LANGUAGES, PRAISE_SOURCES
from roadboard.models.roadmap_item import PRIORITIES, STATUSES
from roadboard.services.reorder import MAX_BATCH
from roadboard.services.tags import MAX_TAG_LENGTH, MAX_TAGS_PER_ITEM
from roadboard.utils.todos import serialize_todos
from roadboard.utils.validators import INT32_MAX, INT32_MIN, Field, Schema, ValidationError

# Create accepts the legacy PLANNED alias; services store it as BACKLOG.
ITEM_STATUSES = STATUSES + ("PLANNED",)
MAX_IMAGES = 12


def _sort_order(**kw) -> Field:
    return Field("int", min_value=INT32_MIN, max_value=INT32_MAX, **kw)


def _image_urls(value: Any) -> Any:
    """Blank entries are not images; drop them before anything counts them."""
    if isinstance(value, list):
        return [v for v in value if not (isinstance(v, str) and not v.strip())]
    return value


def _todo_text(value: Any) -> Any:
    """Accept the to-do list either pre-serialized or as [{text, done}, ...]."""
    if isinstance(value, list):
        if not all(isinstance(t, dict) for t in value):
            raise ValidationError("todo", "must be a string or a list of {text, done}")
        return serialize_todos(value)
    return value


# ---- boards ----
board_create_schema = Schema({
    "name": Field("str", required=True, min_len=1, max_len=80),
    "description": Field("str", max_len=2000, default=""),
    "sortOrder": _sort_order(),
})

board_update_schema = Schema({
    "name": Field("str", min_len=1, max_len=80),
    "description": Field("str", max_len=2000, nullable=True),
    "sortOrder": _sort_order(nullable=True),
})


# ---- items ----
item_image_schema = Schema({
    "url": Field("url", required=True, max_len=4000),
    "caption": Field("str", max_len=2000, default=""),
})

item_create_schema = Schema({
    "boardId": Field("str", min_len=1),
    "title": Field("str", required=True, min_len=1, max_len=120),
    "description": Field("str", max_len=20000, default=""),
    "source": Field("str", max_len=2000, default=""),
    "jiraKey": Field("str", max_len=50, default=""),
    "priority": Field("enum", choices=PRIORITIES, default="P2"),
    "status": Field("enum", choices=ITEM_STATUSES, default="PLANNED"),
    "tags": Field("list", max_items=MAX_TAGS_PER_ITEM, default=[],
                  item=Field("str", min_len=1, max_len=MAX_TAG_LENGTH)),
    "startDate": Field("date", nullable=True),
    "endDate": Field("date", nullable=True),
    "sortOrder": _sort_order(),
    "image": Field("object", nullable=True, schema=item_image_schema),
})

item_update_schema = Schema({
    "boardId": Field("str", min_len=1),
    "title": Field("str", min_len=1, max_len=120),
    "description": Field("str", max_len=20000, nullable=True),
    "source": Field("str", max_len=2000, nullable=True),
    "jiraKey": Field("str", max_len=50, nullable=True),
    "priority": Field("enum", choices=PRIORITIES),
    "status": Field("enum", choices=ITEM_STATUSES),
    "tags": Field("list", max_items=MAX_TAGS_PER_ITEM, nullable=True,
                  item=Field("str", min_len=1, max_len=MAX_TAG_LENGTH)),
    # "" clears a date the same way null does
    "startDate": Field("date", nullable=True, coerce=lambda v: v or None),
    "endDate": Field("date", nullable=True, coerce=lambda v: v or None),
    "sortOrder": _sort_order(),
    "images": Field("list", max_items=MAX_IMAGES, nullable=True,
                    item=Field("object", schema=item_image_schema)),
})


# ---- feedback ----
def _feedback_has_content(data: dict) -> None:
    has_any = any((data.get(k) or "").strip() for k in ("userName", "email", "content", "todo"))
    if not has_any and not (data.get("kind") == "PRAISE" and data.get("images")):
        raise ValidationError(
            "content",
            "fill in at least one of userName, email, content or todo (praise may carry only images)",
        )


feedback_create_schema = Schema(
    {
        "kind": Field("enum", choices=KINDS, default="FEEDBACK"),
        "userName": Field("str", max_len=120, default=""),
        "email": Field("str", max_len=200, default=""),
        "device": Field("enum", choices=DEVICES, default="-"),
        "feedbackType": Field("enum", choices=FEEDBACK_TYPES),
        "source": Field("enum", choices=PRAISE_SOURCES),
        "language": Field("enum", choices=LANGUAGES),
        "content": Field("str", max_len=20000, default=""),
        "todo": Field("str", max_len=2000, default="", coerce=_todo_text),
        "todoDone": Field("bool", default=False),
        "images": Field("list", max_items=MAX_IMAGES, default=[], coerce=_image_urls,
                    item=Field("str", max_len=4000)),
    },
    checks=[_feedback_has_content],
)

# null on an enum resets it to the neutral value
feedback_update_schema = Schema({
    "kind": Field("enum", choices=KINDS),
    "userName": Field("str", max_len=120, nullable=True),
    "email": Field("str", max_len=200, nullable=True),
    "device": Field("enum", choices=DEVICES, nullable=True),
    "feedbackType": Field("enum", choices=FEEDBACK_TYPES, nullable=True),
    "source": Field("enum", choices=PRAISE_SOURCES, nullable=True),
    "language": Field("enum", choices=LANGUAGES, nullable=True),
    "content": Field("str", max_len=20000, nullable=True),
    "todo": Field("str", max_len=2000, nullable=True, coerce=_todo_text),
    "todoDone": Field("bool", nullable=True),
    "images": Field("list", max_items=MAX_IMAGES, nullable=True, coerce=_image_urls,
                    item=Field("str", max_len=4000)),
})

todo_toggle_schema = Schema({
    "done": Field("bool", nullable=True),
})


# ---- reorder ----
def _reorder_schema(with_status: bool) -> Schema:
    fields = {
        "id": Field("str", required=True, min_len=1),
        "sortOrder": _sort_order(required=True),
    }
    if with_status:
        fields["status"] = Field("enum", choices=STATUSES)
    return Schema({
        "updates": Field(
            "list",
            required=True,
            min_items=1,
            max_items=MAX_BATCH,
            item=Field("object", schema=Schema(fields)),
        ),
    })


item_reorder_schema = _reorder_schema(with_status=True)
feedback_reorder_schema = _reorder_schema(with_status=False)
