"""
List query pipeline shared by orders and products: filter -> sort -> paginate.

All functions are pure; the input sequence is never mutated.
"""
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from errors import InvalidQueryError

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]


def get_field(record: Record, path: str) -> Any:
    """Resolve a dotted path such as ``customerInfo.email``."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def equals(path: str, expected: Any, ignore_case: bool = False) -> Predicate:
    def predicate(record: Record) -> bool:
        value = get_field(record, path)
        if ignore_case and isinstance(value, str) and isinstance(expected, str):
            return value.lower() == expected.lower()
        return value == expected
    return predicate


def contains_text(term: str, paths: Iterable[str]) -> Predicate:
    """Case-insensitive substring match against any of the given fields."""
    needle = term.lower()
    paths = tuple(paths)

    def predicate(record: Record) -> bool:
        for path in paths:
            value = get_field(record, path)
            if isinstance(value, str) and needle in value.lower():
                return True
        return False
    return predicate


def apply_filters(records: Sequence[Record], predicates: Iterable[Optional[Predicate]]) -> List[Record]:
    active = [p for p in predicates if p is not None]
    return [r for r in records if all(p(r) for p in active)]


def parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        return datetime.min
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min
    # compare everything as naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def newest_first(records: Sequence[Record], path: str = "createdAt") -> List[Record]:
    # sorted() is stable, also with reverse=True
    return sorted(records, key=lambda r: parse_timestamp(get_field(r, path)), reverse=True)


def paginate(records: Sequence[Record], page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
    """Slice one page out of ``records`` and wrap it in the list envelope.

    ``limit=None`` means everything on a single page.
    """
    if page is None:
        page = 1
    if not isinstance(page, int) or page < 1:
        raise InvalidQueryError("page must be a positive integer", "page")
    if limit is not None and (not isinstance(limit, int) or limit < 1):
        raise InvalidQueryError("limit must be a positive integer", "limit")

    total = len(records)
    if limit is None:
        page_size = total
        total_pages = 1 if total else 0
        items = list(records) if page == 1 else []
    else:
        page_size = limit
        total_pages = math.ceil(total / limit)
        offset = (page - 1) * limit
        items = list(records[offset:offset + limit])

    return {
        "items": items,
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": total_pages,
    }


def run_query(
    records: Sequence[Record],
    predicates: Iterable[Optional[Predicate]] = (),
    sort: Optional[Callable[[Sequence[Record]], List[Record]]] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    filtered = apply_filters(records, predicates)
    if sort is not None:
        filtered = sort(filtered)
    return paginate(filtered, page, limit)
