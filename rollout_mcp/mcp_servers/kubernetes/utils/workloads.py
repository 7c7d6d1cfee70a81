from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .errors import NoPriorRevision, RevisionNotFound, RolloutError, with_revision
from .formatting import RolloutResult, format_history, format_revision_detail
from .kinds import (
    CHANGE_CAUSE_ANNOTATION,
    CONTROLLER_REVISION_HASH_LABEL,
    POD_TEMPLATE_HASH_LABEL,
    RESTARTED_AT_ANNOTATION,
    WorkloadKind,
)
from .ownership import resolve_owned_records
from .revisions import RevisionIndex, workload_revision
from .status import counters_from_workload, format_status

logger = logging.getLogger(__name__)

GENERATED_TEMPLATE_LABELS = (POD_TEMPLATE_HASH_LABEL, CONTROLLER_REVISION_HASH_LABEL)


@dataclass(frozen=True)
class RolloutRequest:
    client: Any
    wk: WorkloadKind
    namespace: str
    name: str
    revision: Optional[int] = None
    now: Optional[datetime] = None

    def result(self, action: str, message: str, **details: Any) -> RolloutResult:
        return RolloutResult(
            action=action,
            kind=self.wk.kind,
            name=self.name,
            namespace=self.namespace,
            message=message,
            details=details,
        )

    def error_ctx(self) -> Dict[str, Any]:
        return {"namespace": self.namespace, "kind": self.wk.kind, "name": self.name}


def rfc3339(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _template(obj: Dict[str, Any]) -> Dict[str, Any]:
    return (obj.get("spec") or {}).get("template") or {}


def _is_paused(obj: Dict[str, Any]) -> bool:
    return bool((obj.get("spec") or {}).get("paused"))


def strip_generated_labels(template: Dict[str, Any]) -> Dict[str, Any]:
    """Drop controller-generated labels so the controller can regenerate them."""

    labels = (template.get("metadata") or {}).get("labels")
    if labels:
        for key in GENERATED_TEMPLATE_LABELS:
            labels.pop(key, None)
    return template


def history(req: RolloutRequest) -> RolloutResult:
    _, records = resolve_owned_records(req.client, req.wk, req.namespace, req.name)
    index = RevisionIndex.build(req.wk, records)

    if req.revision:
        entry = index.get(req.revision)
        if entry is None:
            raise RevisionNotFound(
                f"unable to find the specified revision {req.revision} in history",
                revision=req.revision,
                **req.error_ctx(),
            )
        return req.result(
            "history",
            format_revision_detail(req.wk, req.name, entry),
            revision=entry.revision,
            change_cause=entry.change_cause,
            record=entry.name,
            template=entry.template,
        )

    revisions = [
        {"revision": e.revision, "change_cause": e.change_cause, "record": e.name} for e in index
    ]
    return req.result("history", format_history(req.wk, req.name, index), revisions=revisions)


def _set_paused(req: RolloutRequest, paused: bool) -> RolloutResult:
    action = "pause" if paused else "resume"
    verb = "paused" if paused else "resumed"
    workload = req.client.get_workload(req.wk, req.namespace, req.name)

    if _is_paused(workload) == paused:
        return req.result(action, f"{req.wk.ref(req.name)} already {verb}", paused=paused, changed=False)

    req.client.patch_workload(req.wk, req.namespace, req.name, {"spec": {"paused": paused}})
    logger.info("%s %s in namespace %s", verb, req.wk.ref(req.name), req.namespace)
    return req.result(action, f"{req.wk.ref(req.name)} {verb}", paused=paused, changed=True)


def pause(req: RolloutRequest) -> RolloutResult:
    return _set_paused(req, True)


def resume(req: RolloutRequest) -> RolloutResult:
    return _set_paused(req, False)


def restart(req: RolloutRequest) -> RolloutResult:
    workload = req.client.get_workload(req.wk, req.namespace, req.name)
    restarted_at = rfc3339(req.now or datetime.now(timezone.utc))
    annotations = dict((_template(workload).get("metadata") or {}).get("annotations") or {})
    annotations[RESTARTED_AT_ANNOTATION] = restarted_at

    patch = {"spec": {"template": {"metadata": {"annotations": annotations}}}}
    req.client.patch_workload(req.wk, req.namespace, req.name, patch)
    logger.info("restarted %s in namespace %s at %s", req.wk.ref(req.name), req.namespace, restarted_at)
    return req.result("restart", f"{req.wk.ref(req.name)} restarted", restartedAt=restarted_at)


def status(req: RolloutRequest) -> RolloutResult:
    workload = req.client.get_workload(req.wk, req.namespace, req.name)
    counters = counters_from_workload(req.wk, workload)
    st = format_status(req.wk, req.name, counters)
    return req.result("status", st.message, state=st.state.value, done=st.done, counters=counters.to_dict())


def undo(req: RolloutRequest) -> RolloutResult:
    workload, records = resolve_owned_records(req.client, req.wk, req.namespace, req.name)
    index = RevisionIndex.build(req.wk, records)
    current = workload_revision(workload)
    if current is None:
        latest = index.latest()
        current = latest.revision if latest else 0

    if req.revision:
        entry = index.get(req.revision)
        if entry is None:
            raise RevisionNotFound(
                f"unable to find the specified revision {req.revision} in history",
                revision=req.revision,
                **req.error_ctx(),
            )
    else:
        entry = index.previous(current)
        if entry is None:
            raise NoPriorRevision(f"no revision older than {current} to roll back to", **req.error_ctx())

    template = entry.template
    if template is None:
        raise RevisionNotFound(
            f"{req.wk.record_kind} {entry.name} carries no pod template",
            revision=entry.revision,
            **req.error_ctx(),
        )

    target = strip_generated_labels(copy.deepcopy(template))
    live = strip_generated_labels(copy.deepcopy(_template(workload)))
    if target == live:
        return req.result(
            "undo",
            f"{req.wk.ref(req.name)} skipped rollback (current template already matches revision {entry.revision})",
            revision=entry.revision,
            fromRevision=current,
            changed=False,
        )

    try:
        body = copy.deepcopy(workload)
        body.setdefault("spec", {})["template"] = target
        meta = body.setdefault("metadata", {})
        annotations = meta.get("annotations") or {}
        annotations[CHANGE_CAUSE_ANNOTATION] = f"rollback to revision {entry.revision}"
        meta["annotations"] = annotations
        req.client.update_workload(req.wk, req.namespace, req.name, body)
    except RolloutError as exc:
        raise with_revision(exc, entry.revision)

    logger.info(
        "rolled back %s in namespace %s from revision %s to %s",
        req.wk.ref(req.name),
        req.namespace,
        current,
        entry.revision,
    )
    return req.result(
        "undo",
        f"{req.wk.ref(req.name)} rolled back to revision {entry.revision}",
        revision=entry.revision,
        fromRevision=current,
        changed=True,
    )
