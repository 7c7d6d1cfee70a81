from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import yaml

from .kinds import WorkloadKind
from .revisions import RevisionEntry, RevisionIndex


def to_yaml_text(value: Any) -> str:
    return yaml.safe_dump(value, sort_keys=False, allow_unicode=True)


@dataclass
class RolloutResult:
    """Outcome of one rollout action.

    ``message`` is the kubectl-style text handed back to the agent; ``details``
    holds the same facts as structured data.
    """

    action: str
    kind: str
    name: str
    namespace: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "output": self.message,
            "action": self.action,
            "kind": self.kind,
            "name": self.name,
            "namespace": self.namespace,
            "details": self.details,
        }


def format_history(wk: WorkloadKind, name: str, index: RevisionIndex) -> str:
    if not len(index):
        return f"No rollout history found for {wk.ref(name)}"

    width = max(len("REVISION"), *(len(str(e.revision)) for e in index)) + 2
    lines: List[str] = [wk.ref(name), f"{'REVISION':<{width}}CHANGE-CAUSE"]
    for e in index:
        lines.append(f"{e.revision:<{width}}{e.change_cause or '<none>'}")
    return "\n".join(lines)


def format_revision_detail(wk: WorkloadKind, name: str, entry: RevisionEntry) -> str:
    header = f"{wk.ref(name)} with revision #{entry.revision}"
    template = entry.template
    if template is None:
        return f"{header}\n<pod template not recorded on {wk.record_kind} {entry.name}>"
    lines = [header]
    if entry.change_cause:
        lines.append(f"Change-Cause: {entry.change_cause}")
    lines.append("Pod Template:")
    lines.append(to_yaml_text(template).rstrip("\n"))
    return "\n".join(lines)
