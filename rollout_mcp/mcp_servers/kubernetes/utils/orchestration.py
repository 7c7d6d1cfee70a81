from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from kubernetes.client import ApiClient, ApiException
from urllib3.exceptions import HTTPError

from .errors import ConflictError, NotFoundError, OrchestrationError, RolloutError
from .kinds import WorkloadKind

logger = logging.getLogger(__name__)


def _api_message(exc: ApiException) -> str:
    body = getattr(exc, "body", None)
    if body:
        try:
            payload = json.loads(body)
        except (TypeError, ValueError):
            payload = None
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
    return str(getattr(exc, "reason", None) or exc)


def translate_api_exception(
    exc: ApiException, *, kind: str, namespace: str, name: Optional[str] = None
) -> RolloutError:
    """Map an ``ApiException`` onto the rollout error taxonomy."""

    status = getattr(exc, "status", None)
    message = _api_message(exc)
    ctx: Dict[str, Any] = {"kind": kind, "namespace": namespace, "name": name}
    if status == 404:
        return NotFoundError(f"{kind.lower()} not found: {message}", **ctx)
    if status == 409:
        return ConflictError(f"object was modified concurrently; re-read and retry: {message}", **ctx)
    return OrchestrationError(f"kubernetes API error ({status}): {message}", status=status, **ctx)


class KubernetesOrchestrationClient:
    """get/list/patch/update over workloads and their revision records.

    Objects are returned as JSON-shaped dicts (camelCase keys), the same shape
    ``kubectl get -o json`` prints, so rollout logic never touches generated
    model classes.
    """

    def __init__(self, apps_api: Any, api_client: Optional[ApiClient] = None) -> None:
        self._apps = apps_api
        self._api = api_client or ApiClient()

    def _to_dict(self, obj: Any) -> Dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self._api.sanitize_for_serialization(obj)

    def _call(self, wk: WorkloadKind, namespace: str, name: Optional[str], fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except ApiException as exc:
            raise translate_api_exception(exc, kind=wk.kind, namespace=namespace, name=name) from exc
        except (HTTPError, OSError) as exc:
            logger.warning("kubernetes API unreachable (%s %s in %s): %s", wk.kind, name or "-", namespace, exc)
            raise OrchestrationError(
                f"kubernetes API unreachable: {exc}", kind=wk.kind, namespace=namespace, name=name
            ) from exc

    def get_workload(self, wk: WorkloadKind, namespace: str, name: str) -> Dict[str, Any]:
        read = getattr(self._apps, f"read_namespaced_{wk.api_suffix}")
        obj = self._call(wk, namespace, name, lambda: read(name=name, namespace=namespace))
        return self._to_dict(obj)

    def list_owned_records(self, wk: WorkloadKind, namespace: str, selector: str) -> List[Dict[str, Any]]:
        """List revision-record candidates matching ``selector``.

        Ownership is not checked here; see ``ownership.resolve_owned_records``.
        """

        list_fn = getattr(self._apps, f"list_namespaced_{wk.record_api_suffix}")
        resp = self._call(wk, namespace, None, lambda: list_fn(namespace=namespace, label_selector=selector))
        items = getattr(resp, "items", None) or []
        logger.debug("listed %d %s candidates in %s (selector=%r)", len(items), wk.record_kind, namespace, selector)
        return [self._to_dict(i) for i in items]

    def patch_workload(self, wk: WorkloadKind, namespace: str, name: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        patch_fn = getattr(self._apps, f"patch_namespaced_{wk.api_suffix}")
        obj = self._call(wk, namespace, name, lambda: patch_fn(name=name, namespace=namespace, body=patch))
        return self._to_dict(obj)

    def update_workload(self, wk: WorkloadKind, namespace: str, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        replace = getattr(self._apps, f"replace_namespaced_{wk.api_suffix}")
        obj = self._call(wk, namespace, name, lambda: replace(name=name, namespace=namespace, body=body))
        return self._to_dict(obj)
