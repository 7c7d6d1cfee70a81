"""Kubernetes rollout utilities.

Business logic grouped by area:
- `kinds`: workload kinds, aliases and well-known annotations
- `orchestration`: apps/v1 adapter returning plain dicts
- `ownership`: owner-reference based revision record lookup
- `revisions`: revision parsing and ordered history
- `workloads`: history/pause/resume/restart/status/undo handlers
- `rollout`: capability table and dispatcher
- `status`: replica counters and progress narrative
- `cluster`: reachability checks
"""

__all__ = [
	"clients",
	"cluster",
	"errors",
	"formatting",
	"kinds",
	"orchestration",
	"ownership",
	"revisions",
	"rollout",
	"status",
	"workloads",
]
