"""
Filter composition over in-memory record snapshots.

Every list page (employees, classes, enrollments, tasks, ...) narrows the
fetched records with a few drop-down filters (facility, program, status).
All active filters are AND-combined:

    compose_filters(records, {"co_so": "A", "tinh_trang": "active"})

A filter value is either NO_FILTER or Selected(value). The legacy UI
sentinels "all" and "" (and None) are converted to NO_FILTER by criterion(),
so "filter by the empty string" must be spelled Selected("") explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union


LEGACY_SENTINELS = ("all", "")


class NoFilter:
    """
    Criterion value meaning "do not restrict by this field".
    """

    _instance: "NoFilter | None" = None

    def __new__(cls) -> "NoFilter":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_FILTER"


NO_FILTER = NoFilter()


@dataclass(frozen=True)
class Selected:
    """
    Criterion value that keeps only records whose field equals `value`.
    """

    value: Any


CriterionValue = Union[NoFilter, Selected]

_MISSING = object()


def criterion(raw: Any) -> CriterionValue:
    """
    Convert a raw UI selection into a criterion value.

    None, '' and 'all' mean no filter. Values that already are criterion
    values are returned unchanged.
    """
    if isinstance(raw, (NoFilter, Selected)):
        return raw
    if raw is None:
        return NO_FILTER
    if isinstance(raw, str) and raw.strip() in LEGACY_SENTINELS:
        return NO_FILTER
    return Selected(raw)


def _field_value(record: Any, name: str) -> Any:
    """
    Read one field from a record, or _MISSING if the record does not have it.

    Mappings are read by key, objects with a field_value() method through
    that method, everything else by attribute.
    """
    if isinstance(record, Mapping):
        return record.get(name, _MISSING)
    getter = getattr(record, "field_value", None)
    if callable(getter):
        try:
            return getter(name)
        except KeyError:
            return _MISSING
    return getattr(record, name, _MISSING)


def active_criteria(criteria: Mapping[str, Any]) -> dict[str, Selected]:
    """
    Return only the criteria that actually restrict the result.
    """
    out: dict[str, Selected] = {}
    for name, raw in criteria.items():
        c = criterion(raw)
        if isinstance(c, Selected):
            out[name] = c
    return out


def has_active_filters(criteria: Mapping[str, Any]) -> bool:
    return bool(active_criteria(criteria))


def reset_criteria(criteria: Mapping[str, Any]) -> dict[str, CriterionValue]:
    """
    Same keys, every value back to NO_FILTER (the "reset filters" button).
    """
    return {name: NO_FILTER for name in criteria}


def matches(record: Any, criteria: Mapping[str, Any]) -> bool:
    for name, sel in active_criteria(criteria).items():
        value = _field_value(record, name)
        # A record without the field never matches a filter on that field
        if value is _MISSING:
            return False
        if value != sel.value:
            return False
    return True


def compose_filters(records: Iterable[Any], criteria: Mapping[str, Any]) -> list[Any]:
    """
    Return the records matching all active criteria, in input order.

    With no active criteria the result holds every record unchanged.
    Records are never copied or mutated.
    """
    active = active_criteria(criteria)
    if not active:
        return list(records)
    return [r for r in records if matches(r, active)]
