from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from flask import request
from sqlalchemy import String

from .errors import ValidationError
from .time_utils import parse_iso_datetime


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_LIMIT = 100

LIKE_ESCAPE = "\\"

# Maximum price: 99,999,999.99 (Numeric(10, 2))
MAX_PRICE = Decimal("99999999.99")


def get_json_body() -> dict:
    """Request JSON as a dict; malformed or non-object bodies become {}."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def require_fields(data: dict, *names: str) -> None:
    """400 listing every missing field, in the order given."""
    missing = [name for name in names if is_blank(data.get(name))]
    if not missing:
        return
    label = "field" if len(missing) == 1 else "fields"
    raise ValidationError(f"Missing required {label}: {', '.join(missing)}", fields=missing)


def require_any_field(data: dict, names: tuple[str, ...] | list[str]) -> None:
    """400 when none of the updatable fields is present."""
    if not any(name in data for name in names):
        raise ValidationError(
            f"No fields to update. Provide at least one of: {', '.join(names)}",
            fields=list(names),
        )


def clean_str(value: Any) -> str:
    return str(value).strip()


def optional_str(value: Any) -> str | None:
    """Trimmed string, or None for missing/blank input."""
    if is_blank(value):
        return None
    return clean_str(value)


def parse_int(value: Any, field: str, *, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be an integer")
        result = int(value)
    elif isinstance(value, str):
        try:
            result = int(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    else:
        raise ValidationError(f"{field} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return result


def optional_int(value: Any, field: str, *, minimum: int | None = None) -> int | None:
    if is_blank(value):
        return None
    return parse_int(value, field, minimum=minimum)


def parse_decimal(value: Any, field: str) -> Decimal:
    """Non-negative money amount from a number or numeric string."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    if amount > MAX_PRICE:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE}")
    return amount.quantize(Decimal("0.01"))


def optional_decimal(value: Any, field: str) -> Decimal | None:
    if is_blank(value):
        return None
    return parse_decimal(value, field)


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def optional_datetime(value: Any, field: str) -> datetime | None:
    if is_blank(value):
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 date")


def validate_email(value: Any) -> str:
    email = clean_str(value)
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format", fields=["email"])
    return email


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def enforce_max_lengths(*instances) -> None:
    """
    400 when a string attribute is longer than its String(n) column.

    Driven by table metadata so every writer gets the same limits the
    store enforces; field names are reported in their camelCase wire form.
    """
    for instance in instances:
        for col in instance.__table__.columns:
            if not isinstance(col.type, String) or not col.type.length:
                continue
            value = getattr(instance, col.key, None)
            if isinstance(value, str) and len(value) > col.type.length:
                field = _camel(col.key)
                raise ValidationError(
                    f"{field} exceeds max length {col.type.length}", fields=[field]
                )


# =============================================================================
# LIST QUERY PARAMETERS
# =============================================================================

def _arg_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def arg_int_or_none(name: str) -> int | None:
    """Optional integer filter; non-numeric input is a 400."""
    raw = request.args.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def arg_decimal_or_none(name: str) -> Decimal | None:
    raw = request.args.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise ValidationError(f"{name} must be a number")
    if not value.is_finite():
        raise ValidationError(f"{name} must be a number")
    return value


def arg_datetime_or_none(name: str) -> datetime | None:
    return optional_datetime(request.args.get(name), name)


def arg_bool(name: str) -> bool:
    return request.args.get(name, "false").strip().lower() == "true"


@dataclass(frozen=True)
class ListParams:
    """
    Shared list contract: 1-indexed page, per-resource default limit
    (clamped to 1..MAX_LIMIT), trimmed search, allow-listed sort column.
    """
    page: int
    limit: int
    search: str
    sort_by: str
    sort_order: str

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.sort_order == "desc"

    @classmethod
    def from_request(
        cls,
        *,
        default_limit: int = 20,
        sort_fields: tuple[str, ...] = (),
        default_sort: str = "createdAt",
        default_order: str = "desc",
    ) -> "ListParams":
        page = max(_arg_int("page", 1), 1)
        limit = min(max(_arg_int("limit", default_limit), 1), MAX_LIMIT)
        search = (request.args.get("search") or "").strip()

        sort_by = request.args.get("sortBy") or default_sort
        if sort_by not in sort_fields:
            sort_by = default_sort

        sort_order = (request.args.get("sortOrder") or default_order).lower()
        if sort_order not in ("asc", "desc"):
            sort_order = default_order

        return cls(page=page, limit=limit, search=search, sort_by=sort_by, sort_order=sort_order)

    def sorting(self) -> dict:
        return {"sortBy": self.sort_by, "sortOrder": self.sort_order}


def build_pagination(page: int, limit: int, total_count: int) -> dict:
    total_pages = math.ceil(total_count / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalCount": total_count,
        "limit": limit,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def paginate(query, params: ListParams) -> tuple[list, dict]:
    """Run count + page fetch for an ORM query already filtered and ordered."""
    total_count = query.order_by(None).count()
    items = query.offset(params.offset).limit(params.limit).all()
    return items, build_pagination(params.page, params.limit, total_count)


def order_clause(column, params: ListParams):
    return column.desc() if params.descending else column.asc()


def search_filter(db, search: str, *columns):
    """Case-insensitive literal substring OR match across the given text columns."""
    pattern = f"%{escape_like(search)}%"
    return db.or_(*[column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns])


def escape_like(text: str) -> str:
    """Make %, _ and the escape character itself match literally in a LIKE pattern."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
