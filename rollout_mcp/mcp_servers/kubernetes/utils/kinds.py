from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from .errors import InvalidArgument

REVISION_ANNOTATION = "deployment.kubernetes.io/revision"
CHANGE_CAUSE_ANNOTATION = "kubernetes.io/change-cause"
RESTARTED_AT_ANNOTATION = "kubectl.kubernetes.io/restartedAt"
POD_TEMPLATE_HASH_LABEL = "pod-template-hash"
CONTROLLER_REVISION_HASH_LABEL = "controller-revision-hash"

ACTIONS: Tuple[str, ...] = ("history", "pause", "resume", "restart", "status", "undo")


@dataclass(frozen=True)
class WorkloadKind:
    """How one workload kind maps onto the ``AppsV1Api`` surface.

    ``api_suffix`` / ``record_api_suffix`` complete the generated client method
    names, e.g. ``read_namespaced_<api_suffix>``.
    """

    kind: str
    api_suffix: str
    record_kind: str
    record_api_suffix: str
    aliases: FrozenSet[str]

    @property
    def resource(self) -> str:
        return f"{self.kind.lower()}.apps"

    def ref(self, name: str) -> str:
        return f"{self.resource}/{name}"


DEPLOYMENT = WorkloadKind(
    kind="Deployment",
    api_suffix="deployment",
    record_kind="ReplicaSet",
    record_api_suffix="replica_set",
    aliases=frozenset({"deployment", "deployments", "deploy", "deployment.apps", "deployments.apps"}),
)

STATEFULSET = WorkloadKind(
    kind="StatefulSet",
    api_suffix="stateful_set",
    record_kind="ControllerRevision",
    record_api_suffix="controller_revision",
    aliases=frozenset({"statefulset", "statefulsets", "sts", "statefulset.apps", "statefulsets.apps"}),
)

DAEMONSET = WorkloadKind(
    kind="DaemonSet",
    api_suffix="daemon_set",
    record_kind="ControllerRevision",
    record_api_suffix="controller_revision",
    aliases=frozenset({"daemonset", "daemonsets", "ds", "daemonset.apps", "daemonsets.apps"}),
)

WORKLOAD_KINDS: Tuple[WorkloadKind, ...] = (DEPLOYMENT, STATEFULSET, DAEMONSET)

_BY_ALIAS: Dict[str, WorkloadKind] = {alias: wk for wk in WORKLOAD_KINDS for alias in wk.aliases}


def lookup_kind(raw: Optional[str]) -> WorkloadKind:
    key = (raw or "").strip().lower()
    wk = _BY_ALIAS.get(key)
    if wk is None:
        supported = ", ".join(k.kind.lower() for k in WORKLOAD_KINDS)
        raise InvalidArgument(f"unsupported resource type {raw!r} (expected one of: {supported})")
    return wk


def normalize_action(raw: Optional[str]) -> str:
    action = (raw or "").strip().lower()
    if action not in ACTIONS:
        raise InvalidArgument(f"unknown rollout action {raw!r} (expected one of: {', '.join(ACTIONS)})")
    return action
