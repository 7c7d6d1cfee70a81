from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict

from .kinds import DAEMONSET, DEPLOYMENT, WorkloadKind


class RolloutState(str, Enum):
    PAUSED = "paused"
    PROPAGATING = "waiting for updates to propagate"
    BECOMING_READY = "waiting for updated replicas to become available"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ReplicaCounters:
    desired: int = 0
    current: int = 0
    updated: int = 0
    ready: int = 0
    available: int = 0
    generation: int = 0
    observed_generation: int = 0
    paused: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RolloutStatus:
    state: RolloutState
    message: str
    counters: ReplicaCounters

    @property
    def done(self) -> bool:
        return self.state is RolloutState.COMPLETE


def _n(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def counters_from_workload(wk: WorkloadKind, obj: Dict[str, Any]) -> ReplicaCounters:
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}
    meta = obj.get("metadata") or {}
    common = {
        "generation": _n(meta.get("generation")),
        "observed_generation": _n(status.get("observedGeneration")),
    }

    if wk is DAEMONSET:
        return ReplicaCounters(
            desired=_n(status.get("desiredNumberScheduled")),
            current=_n(status.get("currentNumberScheduled")),
            updated=_n(status.get("updatedNumberScheduled")),
            ready=_n(status.get("numberReady")),
            available=_n(status.get("numberAvailable")),
            **common,
        )

    return ReplicaCounters(
        desired=_n(spec.get("replicas")),
        current=_n(status.get("replicas")),
        updated=_n(status.get("updatedReplicas")),
        ready=_n(status.get("readyReplicas")),
        available=_n(status.get("availableReplicas")),
        paused=bool(spec.get("paused")) if wk is DEPLOYMENT else False,
        **common,
    )


def _label(wk: WorkloadKind) -> str:
    return "daemon set" if wk is DAEMONSET else wk.kind.lower()


def format_status(wk: WorkloadKind, name: str, c: ReplicaCounters) -> RolloutStatus:
    """Narrate rollout progress from replica counters, kubectl style.

    Checks run in a fixed order: paused, propagation, readiness, complete.
    """

    label = _label(wk)
    unit = "replicas" if wk is DEPLOYMENT else "pods"
    waiting = f'{label} "{name}": waiting for rollout to finish'

    def out(state: RolloutState, message: str) -> RolloutStatus:
        return RolloutStatus(state=state, message=message, counters=c)

    if c.paused:
        return out(RolloutState.PAUSED, f'{label} "{name}" rollout is paused (resume it to continue)')

    if c.generation > c.observed_generation:
        return out(RolloutState.PROPAGATING, f'{label} "{name}": waiting for {label} spec update to be observed')
    if c.updated < c.desired:
        return out(RolloutState.PROPAGATING, f"{waiting}: {c.updated} out of {c.desired} new {unit} updated")
    if wk is DEPLOYMENT and c.current > c.updated:
        return out(RolloutState.PROPAGATING, f"{waiting}: {c.current - c.updated} old replicas are pending termination")

    if wk is DEPLOYMENT and c.available < c.updated:
        return out(RolloutState.BECOMING_READY, f"{waiting}: {c.available} of {c.updated} updated replicas are available")
    if wk is DAEMONSET and c.available < c.desired:
        return out(RolloutState.BECOMING_READY, f"{waiting}: {c.available} of {c.desired} updated pods are available")
    if wk not in (DEPLOYMENT, DAEMONSET) and c.ready < c.desired:
        return out(RolloutState.BECOMING_READY, f'{label} "{name}": waiting for {c.desired - c.ready} pods to be ready')

    if wk is DEPLOYMENT or wk is DAEMONSET:
        return out(RolloutState.COMPLETE, f'{label} "{name}" successfully rolled out')
    return out(RolloutState.COMPLETE, f'{label} "{name}" rolling update complete: {c.updated} pods updated')
