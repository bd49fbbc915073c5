from __future__ import annotations

import math
from typing import Mapping


def remap(data: Mapping, mapping: Mapping[str, str]) -> dict:
    """Rename camelCase request keys to model field names, dropping unknown keys."""
    return {mapping[k]: v for k, v in data.items() if k in mapping}


def save_changes(obj, changes: Mapping) -> list[str]:
    """Assign ``changes`` and save only those columns.

    ``update_fields`` makes Django raise when the row vanished in the
    meantime instead of silently inserting it again.
    """
    fields = []
    for name, value in changes.items():
        setattr(obj, name, value)
        fields.append(name)
    if not fields:
        return fields
    if any(f.name == 'updated_at' for f in obj._meta.concrete_fields):
        fields.append('updated_at')
    obj.save(update_fields=fields)
    return fields


def paginate(qs, page: int, size: int):
    """Return ``(rows, total, total_pages)`` for a 1-based page."""
    total = qs.count()
    start = (page - 1) * size
    rows = list(qs[start:start + size])
    return rows, total, (math.ceil(total / size) if total else 0)


def iso(value):
    return value.isoformat() if value else None
