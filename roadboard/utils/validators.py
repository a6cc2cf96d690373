"""
Field-level payload validation.

A ``Schema`` is an ordered set of ``Field`` rules. ``Schema.validate`` walks the
fields in declaration order and raises ``ValidationError`` for the first rule
that fails, so callers can surface a single, specific message.

Two modes:
  - full (create): omitted fields take their defaults.
  - partial (update): the result is a ``Patch`` that only carries fields the
    caller actually sent. An explicit ``null`` or ``""`` is a provided value.
"""
import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional
from urllib.parse import urlparse


DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Range of a 32-bit INTEGER column (PostgreSQL integer).
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class ValidationError(ValueError):
    """First violated rule for a payload."""

    def __init__(self, field: Optional[str], message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}" if field else message)

    def to_dict(self) -> dict:
        return {"error": "validation_error", "field": self.field, "detail": self.message}


class Patch(dict):
    """Validated partial payload; keys are exactly the fields the caller sent."""

    def provided(self, name: str) -> bool:
        return name in self

    def value(self, name: str, default: Any = MISSING) -> Any:
        return self.get(name, default)


class Field:
    """
    kind: "str" | "int" | "bool" | "enum" | "date" | "url" | "list" | "object"
    For "list", ``item`` is the Field applied to each element.
    For "object", ``schema`` is the nested Schema.
    """

    def __init__(
        self,
        kind: str = "str",
        *,
        required: bool = False,
        default: Any = MISSING,
        nullable: bool = False,
        min_len: Optional[int] = None,
        max_len: Optional[int] = None,
        choices: Optional[Iterable[str]] = None,
        pattern: Optional[re.Pattern] = None,
        item: Optional["Field"] = None,
        schema: Optional["Schema"] = None,
        min_items: Optional[int] = None,
        max_items: Optional[int] = None,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
        trim: bool = True,
        coerce: Optional[Callable[[Any], Any]] = None,
    ):
        self.kind = kind
        self.required = required
        self.default = default
        self.nullable = nullable
        self.min_len = min_len
        self.max_len = max_len
        self.choices = tuple(choices) if choices is not None else None
        self.pattern = pattern
        self.item = item
        self.schema = schema
        self.min_items = min_items
        self.max_items = max_items
        self.min_value = min_value
        self.max_value = max_value
        self.trim = trim
        self.coerce = coerce

    def default_value(self) -> Any:
        # Fresh copies for mutable defaults
        if isinstance(self.default, list):
            return list(self.default)
        if isinstance(self.default, dict):
            return dict(self.default)
        return self.default

    def clean(self, name: str, value: Any) -> Any:
        if value is None:
            if self.nullable:
                return None
            raise ValidationError(name, "must not be null")

        if self.coerce is not None:
            value = self.coerce(value)
            if value is None and self.nullable:
                return None

        handler = getattr(self, f"_clean_{self.kind}", None)
        if handler is None:
            raise ValueError(f"unknown field kind {self.kind!r}")
        return handler(name, value)

    # ---- kinds ----
    def _clean_str(self, name, value):
        if not isinstance(value, str):
            raise ValidationError(name, "must be a string")
        s = value.strip() if self.trim else value
        if self.min_len is not None and len(s) < self.min_len:
            if self.min_len == 1:
                raise ValidationError(name, "is required")
            raise ValidationError(name, f"must be at least {self.min_len} characters")
        if self.max_len is not None and len(s) > self.max_len:
            raise ValidationError(name, f"must be at most {self.max_len} characters")
        if self.pattern is not None and not self.pattern.match(s):
            raise ValidationError(name, "has an invalid format")
        return s

    def _clean_int(self, name, value):
        if isinstance(value, bool):
            raise ValidationError(name, "must be an integer")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            raise ValidationError(name, "must be an integer")
        if self.min_value is not None and value < self.min_value:
            raise ValidationError(name, f"must be at least {self.min_value}")
        if self.max_value is not None and value > self.max_value:
            raise ValidationError(name, f"must be at most {self.max_value}")
        return value

    def _clean_bool(self, name, value):
        if not isinstance(value, bool):
            raise ValidationError(name, "must be a boolean")
        return value

    def _clean_enum(self, name, value):
        if not isinstance(value, str) or value not in (self.choices or ()):
            allowed = ", ".join(self.choices or ())
            raise ValidationError(name, f"must be one of: {allowed}")
        return value

    def _clean_date(self, name, value):
        if not isinstance(value, str) or not DATE_ONLY_RE.match(value):
            raise ValidationError(name, "must be a date in YYYY-MM-DD format")
        try:
            datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            raise ValidationError(name, "is not a valid calendar date")
        return value

    def _clean_url(self, name, value):
        s = self._clean_str(name, value)
        parsed = urlparse(s)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(name, "must be an absolute http(s) URL")
        return s

    def _clean_list(self, name, value):
        if not isinstance(value, list):
            raise ValidationError(name, "must be a list")
        if self.min_items is not None and len(value) < self.min_items:
            raise ValidationError(name, f"must contain at least {self.min_items} item(s)")
        if self.max_items is not None and len(value) > self.max_items:
            raise ValidationError(name, f"must contain at most {self.max_items} item(s)")
        if self.item is None:
            return list(value)
        return [self.item.clean(f"{name}[{i}]", v) for i, v in enumerate(value)]

    def _clean_object(self, name, value):
        if not isinstance(value, dict):
            raise ValidationError(name, "must be an object")
        return self.schema.validate(value, prefix=f"{name}.")


class Schema:
    def __init__(self, fields: Dict[str, Field], *, checks: Iterable[Callable[[dict], None]] = ()):
        self.fields = fields
        self.checks = tuple(checks)

    def validate(self, data: Any, *, partial: bool = False, prefix: str = "") -> dict:
        """
        Return the cleaned payload (a ``Patch`` when ``partial``).
        Unknown keys are dropped.
        """
        if not isinstance(data, dict):
            raise ValidationError(prefix.rstrip(".") or None, "payload must be a JSON object")

        out = Patch() if partial else {}
        for name, field in self.fields.items():
            key = f"{prefix}{name}"
            if name not in data:
                if partial:
                    continue
                if field.required:
                    raise ValidationError(key, "is required")
                default = field.default_value()
                if default is not MISSING:
                    out[name] = default
                continue
            out[name] = field.clean(key, data[name])

        for check in self.checks:
            check(out)
        return out


def clean_str(val: Optional[str], max_len: int = 255) -> Optional[str]:
    """
    Collapse whitespace, trim, enforce max length. Returns None if empty after cleaning.
    """
    if val is None:
        return None
    s = re.sub(r"\s+", " ", val).strip()
    if not s:
        return None
    return s[:max_len]
