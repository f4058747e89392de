# src/ghbackup/engine/orchestrator.py
"""Traversal orchestrator: checkpoint-gated, budget-limited tree walk.

For every node, in a fixed pre-order:
1. Ask the resume marker store whether the node is skipped, resumed or new
2. Persist the node as the resume point before any new costed step
3. Reserve the node's cost; running out halts the whole traversal. Ancestors
   of the resume point are walked through free of charge
4. Run the node's action, which yields the node's children
5. Walk the children
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ghbackup.contracts import (
    Admission,
    BudgetExhaustedError,
    RemoteError,
    TraversalResult,
)
from ghbackup.core.checkpoint import CheckpointID
from ghbackup.core.logging import get_logger
from ghbackup.engine.context import RunContext

logger = get_logger(__name__)


@dataclass(frozen=True)
class TraversalNode:
    """One step of a backup target tree.

    Attributes:
        checkpoint: Identity of the step; the parent's id is always a prefix
        cost: Remote accesses the step needs; 0 for structural groupings
        action: Performs the step and returns its children, in visit order
    """

    checkpoint: CheckpointID
    cost: int
    action: Callable[[], Iterable[TraversalNode] | None]

    def __post_init__(self) -> None:
        if self.cost < 0:
            raise ValueError(f"cost must be non-negative, got {self.cost}")

    @classmethod
    def group(cls, checkpoint: CheckpointID, children: Callable[[], Iterable[TraversalNode]]) -> TraversalNode:
        """Structural node that only groups the children it produces."""
        return cls(checkpoint=checkpoint, cost=0, action=children)

    @property
    def is_structural(self) -> bool:
        return self.cost == 0


class TraversalOrchestrator:
    """Walks traversal trees under a RunContext.

    Example:
        orchestrator = TraversalOrchestrator(context)
        result = orchestrator.traverse(plan.for_user(user))
        if not result.completed:
            # the marker store now names result.halted_at (or a finer step)
            ...
    """

    def __init__(self, context: RunContext) -> None:
        self._context = context
        self._executed = 0
        self._skipped = 0

    def traverse(self, roots: Iterable[TraversalNode]) -> TraversalResult:
        """Walk ``roots`` and their descendants in order.

        Returns:
            TraversalResult; ``completed`` is False when the access budget ran
            out, with ``halted_at`` naming the step that could not be afforded
        """
        self._executed = 0
        self._skipped = 0
        markers = self._context.markers
        roots = list(roots)

        pending = markers.pending
        if pending is not None and not any(root.checkpoint.contains(pending) for root in roots):
            markers.release()

        try:
            self._walk(roots)
        except BudgetExhaustedError as e:
            markers.record_halt(e.checkpoint)
            logger.info(
                "Access budget exhausted, halting traversal",
                checkpoint=str(e.checkpoint),
                resume_at=str(markers.persisted),
            )
            return TraversalResult(
                completed=False,
                halted_at=e.checkpoint,
                executed=self._executed,
                skipped=self._skipped,
                budget_remaining=self._context.budget.remaining,
            )

        if markers.resuming:
            markers.release()
        return TraversalResult(
            completed=True,
            executed=self._executed,
            skipped=self._skipped,
            budget_remaining=self._context.budget.remaining,
        )

    def _walk(self, nodes: Iterable[TraversalNode]) -> None:
        for node in nodes:
            self._visit(node)

    def _visit(self, node: TraversalNode) -> None:
        markers = self._context.markers
        checkpoint = node.checkpoint

        admission = markers.query(checkpoint)
        if admission is Admission.SKIP:
            self._skipped += 1
            return

        # Ancestors of the pending marker only rebuild their children, uncharged
        charged = not node.is_structural and not (
            admission is Admission.RESUME_HERE and markers.resuming
        )
        if charged:
            if admission is Admission.NORMAL:
                markers.set(checkpoint)
            if not self._context.budget.reserve(node.cost):
                raise BudgetExhaustedError(checkpoint)

        try:
            children = node.action()
        except RemoteError as e:
            # Marker stays at this step; the next sibling proceeds
            self._context.record_error(
                "Remote access failed", checkpoint=str(checkpoint), error=str(e)
            )
            self._release_below(checkpoint)
            return

        if charged:
            self._executed += 1
        logger.debug(
            "Step done",
            checkpoint=str(checkpoint),
            admission=admission.name,
            remaining=self._context.budget.remaining,
        )

        self._walk(children or ())
        self._release_below(checkpoint)

    def _release_below(self, checkpoint: CheckpointID) -> None:
        """Leave resume mode if the pending marker lies below a finished step."""
        markers = self._context.markers
        pending = markers.pending
        if pending is not None and checkpoint.is_ancestor_of(pending):
            markers.release()
