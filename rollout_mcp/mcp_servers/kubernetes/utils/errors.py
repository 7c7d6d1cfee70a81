from __future__ import annotations

from typing import Any, Dict, Optional


class RolloutError(Exception):
    """Base error for rollout operations.

    Carries the namespace/kind/name/revision the operation was addressing so
    the MCP layer can report it back to the operator.
    """

    def __init__(
        self,
        message: str,
        *,
        namespace: Optional[str] = None,
        kind: Optional[str] = None,
        name: Optional[str] = None,
        revision: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.namespace = namespace
        self.kind = kind
        self.name = name
        self.revision = revision

    def context(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key in ("namespace", "kind", "name", "revision"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": str(self), "error_type": type(self).__name__, **self.context()}

    def __str__(self) -> str:
        target = ""
        if self.kind and self.name:
            target = f"{self.kind.lower()}/{self.name}"
            if self.namespace:
                target = f"{target} in namespace {self.namespace!r}"
        if self.revision is not None:
            target = f"{target} (revision {self.revision})" if target else f"revision {self.revision}"
        return f"{self.message} [{target}]" if target else self.message


class InvalidArgument(RolloutError):
    pass


class NotFoundError(RolloutError):
    pass


class UnsupportedOperation(RolloutError):
    pass


class RevisionNotFound(RolloutError):
    pass


class NoPriorRevision(RolloutError):
    pass


class ConflictError(RolloutError):
    pass


class OrchestrationError(RolloutError):
    """Any other API server failure (RBAC, validation, transport)."""

    def __init__(self, message: str, *, status: Optional[int] = None, **ctx: Any) -> None:
        super().__init__(message, **ctx)
        self.status = status

    def context(self) -> Dict[str, Any]:
        out = super().context()
        if self.status is not None:
            out["status"] = self.status
        return out


def with_revision(exc: RolloutError, revision: int) -> RolloutError:
    """Attach ``revision`` to an error raised while applying that revision."""

    if exc.revision is None:
        exc.revision = revision
    return exc
