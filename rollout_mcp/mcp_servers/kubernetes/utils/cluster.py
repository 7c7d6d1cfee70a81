from __future__ import annotations

from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Dict, List

from kubernetes.client import ApiException


def health_check(apps_api: Any, version_api: Any, namespace: str = "default") -> Dict[str, Any]:
    """Reachability of the API server and of the apps/v1 endpoints rollouts use."""

    checks: List[Dict[str, Any]] = []

    def _run(name: str, fn) -> None:
        started = perf_counter()
        try:
            fn()
            checks.append({"name": name, "ok": True, "ms": int((perf_counter() - started) * 1000)})
        except ApiException as exc:
            checks.append(
                {
                    "name": name,
                    "ok": False,
                    "ms": int((perf_counter() - started) * 1000),
                    "status": exc.status,
                    "error": str(exc.reason or exc),
                }
            )
        except Exception as exc:  # noqa: BLE001
            checks.append({"name": name, "ok": False, "ms": int((perf_counter() - started) * 1000), "error": str(exc)})

    version_info: Dict[str, Any] | None = None

    def _version() -> None:
        nonlocal version_info
        v = version_api.get_code()
        version_info = {
            "major": getattr(v, "major", None),
            "minor": getattr(v, "minor", None),
            "gitVersion": getattr(v, "git_version", None),
            "platform": getattr(v, "platform", None),
        }

    _run("version", _version)
    _run("deployments", lambda: apps_api.list_namespaced_deployment(namespace=namespace, limit=1))
    _run("replicasets", lambda: apps_api.list_namespaced_replica_set(namespace=namespace, limit=1))

    ok = all(c.get("ok") for c in checks)
    return {
        "ok": ok,
        "reachable": any(c.get("ok") for c in checks),
        "checkedAt": datetime.now(timezone.utc).isoformat(),
        "namespace": namespace,
        "version": version_info,
        "checks": checks,
    }
