"""
Critical path analysis over a project's task tree.

Leaf tasks form the schedule network. A dependency on a summary task stands
for every leaf below it, and a summary's own dependencies apply to all of its
descendants. A forward pass gives early start/finish, a backward pass late
start/finish, and a leaf is critical when its total float is zero. Summary
tasks roll their leaves up. All values are whole days counted from the
project start.
"""

from collections import deque
from typing import Dict, List, Sequence, Set

from pydantic import BaseModel, Field

from ..shared.logger import get_logger
from .errors import ValidationError
from .types import Task

logger = get_logger("generator", __name__)


class CriticalPathResult(BaseModel):
    """Outcome of a critical path pass."""

    project_duration: int = Field(default=0, ge=0, description="Days from project start to the last early finish")
    critical_path: List[str] = Field(default_factory=list, description="Critical leaf ids in schedule order")


def _children_by_parent(tasks: Sequence[Task]) -> Dict[str, List[Task]]:
    ids = {t.id for t in tasks}
    children: Dict[str, List[Task]] = {}
    for task in tasks:
        if task.parent_id and task.parent_id in ids and task.parent_id != task.id:
            children.setdefault(task.parent_id, []).append(task)
    return children


def _leaves_under(task_id: str, children: Dict[str, List[Task]]) -> List[str]:
    leaves: List[str] = []
    stack = [task_id]
    seen: Set[str] = set()
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        kids = children.get(current)
        if kids:
            stack.extend(reversed([k.id for k in kids]))
        else:
            leaves.append(current)
    return leaves


def _ancestors(task: Task, by_id: Dict[str, Task]) -> List[Task]:
    chain: List[Task] = []
    seen = {task.id}
    parent_id = task.parent_id
    while parent_id in by_id and parent_id not in seen:
        seen.add(parent_id)
        parent = by_id[parent_id]
        chain.append(parent)
        parent_id = parent.parent_id
    return chain


def compute_critical_path(tasks: Sequence[Task]) -> CriticalPathResult:
    """Fill in CPM fields and ``is_critical_path`` on ``tasks`` in place.

    Dependencies naming ids outside ``tasks`` are ignored, as are
    dependencies of a task on one of its own ancestors.

    Raises:
        ValidationError: If the dependencies form a cycle.
    """
    if not tasks:
        return CriticalPathResult()

    by_id = {t.id: t for t in tasks}
    order = {t.id: i for i, t in enumerate(tasks)}
    children = _children_by_parent(tasks)
    leaves = [t for t in tasks if t.id not in children]
    expanded = {t.id: _leaves_under(t.id, children) for t in tasks}

    predecessors: Dict[str, Set[str]] = {}
    successors: Dict[str, Set[str]] = {leaf.id: set() for leaf in leaves}
    for leaf in leaves:
        lineage = [leaf] + _ancestors(leaf, by_id)
        blocked = {t.id for t in lineage}
        preds: Set[str] = set()
        for holder in lineage:
            for dep_id in holder.dependencies:
                if dep_id not in by_id or dep_id in blocked:
                    continue
                preds.update(p for p in expanded[dep_id] if p != leaf.id)
        predecessors[leaf.id] = preds
        for pred in preds:
            successors[pred].add(leaf.id)

    # Kahn's algorithm, ties broken by display order
    remaining = {leaf_id: len(preds) for leaf_id, preds in predecessors.items()}
    ready = deque(sorted((i for i, n in remaining.items() if n == 0), key=order.get))
    topo: List[str] = []
    while ready:
        current = ready.popleft()
        topo.append(current)
        for succ in sorted(successors[current], key=order.get):
            remaining[succ] -= 1
            if remaining[succ] == 0:
                ready.append(succ)
    if len(topo) != len(leaves):
        done = set(topo)
        stuck = sorted((i for i in remaining if i not in done), key=order.get)
        names = ", ".join(by_id[i].name for i in stuck)
        logger.warning(f"Dependency cycle detected among {len(stuck)} task(s)")
        raise ValidationError(f"Task dependencies form a cycle: {names}")

    early_start: Dict[str, int] = {}
    early_finish: Dict[str, int] = {}
    for leaf_id in topo:
        es = max((early_finish[p] for p in predecessors[leaf_id]), default=0)
        early_start[leaf_id] = es
        early_finish[leaf_id] = es + by_id[leaf_id].duration

    finish = max(early_finish.values(), default=0)
    late_start: Dict[str, int] = {}
    late_finish: Dict[str, int] = {}
    for leaf_id in reversed(topo):
        lf = min((late_start[s] for s in successors[leaf_id]), default=finish)
        late_finish[leaf_id] = lf
        late_start[leaf_id] = lf - by_id[leaf_id].duration

    for leaf_id in topo:
        leaf = by_id[leaf_id]
        leaf.early_start = early_start[leaf_id]
        leaf.early_finish = early_finish[leaf_id]
        leaf.late_start = late_start[leaf_id]
        leaf.late_finish = late_finish[leaf_id]
        leaf.float_days = late_start[leaf_id] - early_start[leaf_id]
        next_start = min((early_start[s] for s in successors[leaf_id]), default=finish)
        leaf.free_float_days = next_start - early_finish[leaf_id]
        leaf.is_critical_path = leaf.float_days == 0

    for task in tasks:
        if task.id not in children:
            continue
        below = [by_id[i] for i in expanded[task.id] if i in early_start]
        if not below:
            continue
        task.early_start = min(t.early_start for t in below)
        task.early_finish = max(t.early_finish for t in below)
        task.late_start = min(t.late_start for t in below)
        task.late_finish = max(t.late_finish for t in below)
        task.float_days = min(t.float_days for t in below)
        task.free_float_days = min(t.free_float_days for t in below)
        task.is_critical_path = any(t.is_critical_path for t in below)

    critical = sorted(
        (i for i in topo if by_id[i].is_critical_path),
        key=lambda i: (early_start[i], early_finish[i], order[i]),
    )
    logger.debug(
        f"Critical path covers {len(critical)} of {len(leaves)} leaf task(s)",
        extra={"payload": {"project_duration": finish}},
    )
    return CriticalPathResult(project_duration=finish, critical_path=critical)
