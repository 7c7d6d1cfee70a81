from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from .errors import InvalidArgument
from .kinds import WorkloadKind

logger = logging.getLogger(__name__)


def selector_to_string(selector: Dict[str, Any] | None) -> str:
    """Render a LabelSelector (``matchLabels`` + ``matchExpressions``) for list calls."""

    selector = selector or {}
    parts: List[str] = [f"{k}={v}" for k, v in sorted((selector.get("matchLabels") or {}).items())]

    for expr in selector.get("matchExpressions") or []:
        key = expr.get("key")
        op = expr.get("operator")
        values = ",".join(expr.get("values") or [])
        if op == "In":
            parts.append(f"{key} in ({values})")
        elif op == "NotIn":
            parts.append(f"{key} notin ({values})")
        elif op == "Exists":
            parts.append(str(key))
        elif op == "DoesNotExist":
            parts.append(f"!{key}")
        else:
            raise InvalidArgument(f"unsupported selector operator {op!r} on key {key!r}")

    return ",".join(parts)


def is_owned_by(record: Dict[str, Any], wk: WorkloadKind, workload: Dict[str, Any]) -> bool:
    """True when ``record`` carries an owner reference naming ``workload``.

    Matching is by kind and name; when both sides have a UID it must match
    too, which rejects records left over from a deleted workload of the same
    name. Labels are never consulted.
    """

    meta = workload.get("metadata") or {}
    name = meta.get("name")
    uid = meta.get("uid")

    for ref in (record.get("metadata") or {}).get("ownerReferences") or []:
        if ref.get("kind") != wk.kind or ref.get("name") != name:
            continue
        if uid and ref.get("uid") and ref.get("uid") != uid:
            continue
        return True
    return False


def resolve_owned_records(
    client: Any, wk: WorkloadKind, namespace: str, name: str
) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Return the live workload and the revision records it owns.

    Raises ``NotFoundError`` (from the client) when the workload is missing; no
    owned records is a normal, empty result.
    """

    workload = client.get_workload(wk, namespace, name)
    selector = selector_to_string((workload.get("spec") or {}).get("selector"))

    candidates = client.list_owned_records(wk, namespace, selector)
    owned = [r for r in candidates if is_owned_by(r, wk, workload)]

    dropped = len(candidates) - len(owned)
    if dropped:
        logger.debug(
            "ignored %d %s object(s) matching selector %r without an owner reference to %s",
            dropped,
            wk.record_kind,
            selector,
            wk.ref(name),
        )
    return workload, owned
