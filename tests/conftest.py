from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from rollout_mcp.mcp_servers.kubernetes.utils.errors import ConflictError, NotFoundError
from rollout_mcp.mcp_servers.kubernetes.utils.kinds import DEPLOYMENT, REVISION_ANNOTATION, WorkloadKind
from rollout_mcp.mcp_servers.kubernetes.utils.rollout import RolloutController

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


def pod_template(image: str, *, labels: Optional[Dict[str, str]] = None, annotations: Optional[Dict[str, str]] = None):
    meta: Dict[str, Any] = {"labels": dict(labels or {"app": "web"})}
    if annotations:
        meta["annotations"] = dict(annotations)
    return {"metadata": meta, "spec": {"containers": [{"name": "app", "image": image}]}}


def make_deployment(
    name: str = "web",
    namespace: str = "prod",
    *,
    revision: Optional[int] = 3,
    image: str = "web:3",
    paused: bool = False,
    template_annotations: Optional[Dict[str, str]] = None,
    status: Optional[Dict[str, Any]] = None,
    replicas: int = 3,
) -> Dict[str, Any]:
    annotations = {REVISION_ANNOTATION: str(revision)} if revision is not None else {}
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{name}",
            "resourceVersion": "100",
            "generation": 1,
            "annotations": annotations,
        },
        "spec": {
            "replicas": replicas,
            "paused": paused,
            "selector": {"matchLabels": {"app": name}},
            "template": pod_template(image, labels={"app": name}, annotations=template_annotations),
        },
        "status": status
        or {
            "observedGeneration": 1,
            "replicas": replicas,
            "updatedReplicas": replicas,
            "readyReplicas": replicas,
            "availableReplicas": replicas,
        },
    }


def make_replica_set(
    owner: str,
    revision: Any,
    *,
    namespace: str = "prod",
    image: Optional[str] = None,
    change_cause: Optional[str] = None,
    owner_kind: str = "Deployment",
    owned: bool = True,
    owner_uid: Optional[str] = None,
    labels: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    annotations: Dict[str, str] = {}
    if revision is not None:
        annotations[REVISION_ANNOTATION] = str(revision)
    if change_cause is not None:
        annotations["kubernetes.io/change-cause"] = change_cause
    template_labels = dict(labels or {"app": owner})
    template_labels["pod-template-hash"] = f"hash{revision}"
    meta: Dict[str, Any] = {
        "name": f"{owner}-{revision}",
        "namespace": namespace,
        "labels": template_labels,
        "annotations": annotations,
    }
    if owned:
        meta["ownerReferences"] = [
            {"apiVersion": "apps/v1", "kind": owner_kind, "name": owner, "uid": owner_uid or f"uid-{owner}", "controller": True}
        ]
    return {
        "metadata": meta,
        "spec": {
            "selector": {"matchLabels": template_labels},
            "template": pod_template(image or f"{owner}:{revision}", labels=template_labels),
        },
    }


def _matches(selector: str, labels: Dict[str, str]) -> bool:
    for term in filter(None, selector.split(",")):
        key, _, value = term.partition("=")
        if labels.get(key) != value:
            return False
    return True


class FakeOrchestrationClient:
    """In-memory stand-in for KubernetesOrchestrationClient."""

    def __init__(self) -> None:
        self.workloads: Dict[tuple, Dict[str, Any]] = {}
        self.records: List[Dict[str, Any]] = []
        self.patches: List[Dict[str, Any]] = []
        self.updates: List[Dict[str, Any]] = []
        self.calls: List[str] = []
        self.conflict_on_update = False

    def add_workload(self, wk: WorkloadKind, obj: Dict[str, Any]) -> None:
        meta = obj["metadata"]
        self.workloads[(wk.kind, meta["namespace"], meta["name"])] = obj

    def add_records(self, *records: Dict[str, Any]) -> None:
        self.records.extend(records)

    def _get(self, wk: WorkloadKind, namespace: str, name: str) -> Dict[str, Any]:
        obj = self.workloads.get((wk.kind, namespace, name))
        if obj is None:
            raise NotFoundError(f"{wk.kind.lower()} not found", kind=wk.kind, namespace=namespace, name=name)
        return obj

    def get_workload(self, wk, namespace, name):
        self.calls.append("get")
        return copy.deepcopy(self._get(wk, namespace, name))

    def list_owned_records(self, wk, namespace, selector):
        self.calls.append("list")
        return [
            copy.deepcopy(r)
            for r in self.records
            if r["metadata"]["namespace"] == namespace and _matches(selector, r["metadata"].get("labels") or {})
        ]

    def patch_workload(self, wk, namespace, name, patch):
        self.calls.append("patch")
        obj = self._get(wk, namespace, name)
        self.patches.append(copy.deepcopy(patch))
        _merge(obj, patch)
        return copy.deepcopy(obj)

    def update_workload(self, wk, namespace, name, body):
        self.calls.append("update")
        current = self._get(wk, namespace, name)
        if self.conflict_on_update:
            raise ConflictError("object was modified concurrently", kind=wk.kind, namespace=namespace, name=name)
        self.updates.append(copy.deepcopy(body))
        current.clear()
        current.update(copy.deepcopy(body))
        return copy.deepcopy(current)


def _merge(target: Dict[str, Any], patch: Dict[str, Any]) -> None:
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


@pytest.fixture
def fake_client() -> FakeOrchestrationClient:
    return FakeOrchestrationClient()


@pytest.fixture
def controller(fake_client) -> RolloutController:
    return RolloutController(fake_client, default_namespace="prod", clock=lambda: FIXED_NOW)


@pytest.fixture
def web(fake_client) -> FakeOrchestrationClient:
    """Deployment `web` at revision 3 owning records 1, 2 and 3."""

    fake_client.add_workload(DEPLOYMENT, make_deployment("web", revision=3, image="web:3"))
    fake_client.add_records(
        make_replica_set("web", 1, change_cause="initial"),
        make_replica_set("web", 2, change_cause=""),
        make_replica_set("web", 3, change_cause="fix"),
    )
    return fake_client
