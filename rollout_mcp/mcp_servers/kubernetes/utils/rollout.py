from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from . import workloads
from .errors import InvalidArgument, UnsupportedOperation
from .formatting import RolloutResult
from .kinds import ACTIONS, DAEMONSET, DEPLOYMENT, STATEFULSET, lookup_kind, normalize_action
from .workloads import RolloutRequest

logger = logging.getLogger(__name__)

Handler = Callable[[RolloutRequest], RolloutResult]

# kind -> action -> handler. Actions missing for a kind are unsupported.
CAPABILITIES: Mapping[str, Mapping[str, Handler]] = {
    DEPLOYMENT.kind: {
        "history": workloads.history,
        "pause": workloads.pause,
        "resume": workloads.resume,
        "restart": workloads.restart,
        "status": workloads.status,
        "undo": workloads.undo,
    },
    STATEFULSET.kind: {
        "history": workloads.history,
        "restart": workloads.restart,
        "status": workloads.status,
    },
    DAEMONSET.kind: {
        "history": workloads.history,
        "restart": workloads.restart,
        "status": workloads.status,
    },
}


def parse_revision_arg(raw: Any) -> Optional[int]:
    """Validate an explicit revision; ``None``/``""``/``0`` all mean "not given"."""

    if raw is None:
        return None
    if isinstance(raw, bool):
        raise InvalidArgument(f"invalid revision: {raw!r}")
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            raw = int(text)
        except ValueError:
            raise InvalidArgument(f"invalid revision: {text!r}") from None
    if not isinstance(raw, int):
        raise InvalidArgument(f"invalid revision: {raw!r}")
    if raw < 0:
        raise InvalidArgument(f"revision must be >= 0, got {raw}")
    return raw or None


class RolloutController:
    """Routes rollout actions to handlers for one named workload per call.

    Holds no state between calls besides the injected client; every call
    re-reads the workload and its revision records.
    """

    def __init__(
        self,
        client: Any,
        *,
        default_namespace: str = "default",
        clock: Optional[Callable[[], datetime]] = None,
        capabilities: Optional[Mapping[str, Mapping[str, Handler]]] = None,
    ) -> None:
        self.client = client
        self.default_namespace = default_namespace
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._capabilities = capabilities or CAPABILITIES

    def allowed_actions(self, kind: str) -> Dict[str, bool]:
        wk = lookup_kind(kind)
        table = self._capabilities.get(wk.kind, {})
        return {action: action in table for action in ACTIONS}

    def execute(
        self,
        namespace: Optional[str],
        kind: str,
        name: str,
        action: str,
        revision: Any = None,
    ) -> RolloutResult:
        wk = lookup_kind(kind)
        act = normalize_action(action)
        ns = (namespace or "").strip() or self.default_namespace
        resource_name = (name or "").strip()
        if not resource_name:
            raise InvalidArgument("resource name is required", namespace=ns, kind=wk.kind)
        rev = parse_revision_arg(revision)

        handler = self._capabilities.get(wk.kind, {}).get(act)
        if handler is None:
            raise UnsupportedOperation(
                f"rollout {act} is not supported for {wk.kind.lower()}",
                namespace=ns,
                kind=wk.kind,
                name=resource_name,
            )
        if rev is not None and act not in ("undo", "history"):
            logger.debug("ignoring revision=%s for rollout %s", rev, act)
            rev = None

        req = RolloutRequest(
            client=self.client,
            wk=wk,
            namespace=ns,
            name=resource_name,
            revision=rev,
            now=self._clock(),
        )
        return handler(req)

    def rollout(
        self,
        namespace: Optional[str],
        kind: str,
        name: str,
        action: str,
        revision: Any = None,
    ) -> str:
        return self.execute(namespace, kind, name, action, revision).message
