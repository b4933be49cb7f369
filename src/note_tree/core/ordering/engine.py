"""Sibling priorities, move validation and the reparent write path.

Positions are encoded as float priorities. Inserting between two siblings
takes the midpoint, so a move never renumbers the other siblings. Repeated
inserts into the same gap halve it each time until float precision runs out;
needs_rebalance() detects that and rebalance() respaces a parent's children.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from note_tree.config import DEFAULT_PRIORITY, PRIORITY_INCREMENT, REBALANCE_MIN_GAP, ROOT_ID
from note_tree.core.storage.repository import NodeRepository
from note_tree.core.tree.navigation import children_of, find_node
from note_tree.models.node import Node


@dataclass(frozen=True)
class BeforeSibling:
    """Place before the sibling at ``index`` in the parent's ordered children."""

    index: int


@dataclass(frozen=True)
class AfterSibling:
    """Place after the sibling at ``index`` in the parent's ordered children."""

    index: int


@dataclass(frozen=True)
class FirstChild:
    pass


@dataclass(frozen=True)
class LastChild:
    pass


PositionHint = BeforeSibling | AfterSibling | FirstChild | LastChild


@dataclass(frozen=True)
class Placement:
    """Where a node goes: the patch applied to it by the repository."""

    parent_id: str
    priority: float


def priority_between(prev: float | None, next_: float | None) -> float:
    """Compute a priority between two neighbours.

    Args:
        prev: Priority of the sibling before the gap, None at the start.
        next_: Priority of the sibling after the gap, None at the end.
    """
    if next_ is None:
        return DEFAULT_PRIORITY if prev is None else prev + PRIORITY_INCREMENT
    if prev is None:
        # Halving only moves a positive value towards the front.
        if next_ <= 0:
            return next_ - PRIORITY_INCREMENT
        return next_ / 2
    return prev + (next_ - prev) / 2


def _gap_neighbours(
    siblings: Sequence[Node], gap: int, exclude: str | None
) -> tuple[Node | None, Node | None]:
    """Return the nearest siblings on each side of a gap, skipping ``exclude``.

    Gap ``i`` sits right before ``siblings[i]``; gap ``len(siblings)`` is the end.
    """
    gap = max(0, min(gap, len(siblings)))
    before = next((s for s in reversed(siblings[:gap]) if s.id != exclude), None)
    after = next((s for s in siblings[gap:] if s.id != exclude), None)
    return before, after


def priority_for(
    siblings: Sequence[Node],
    hint: PositionHint,
    *,
    exclude: str | None = None,
) -> float:
    """Compute the priority for a position among ordered siblings.

    Args:
        siblings: The new parent's children, ordered by priority.
        hint: Requested position. Indices refer to ``siblings``.
        exclude: Id of the node being moved; it is never used as a neighbour.
    """
    if isinstance(hint, FirstChild):
        gap = 0
    elif isinstance(hint, LastChild):
        gap = len(siblings)
    elif isinstance(hint, BeforeSibling):
        gap = hint.index
    elif isinstance(hint, AfterSibling):
        gap = hint.index + 1
    else:
        msg = f"Unknown position hint: {hint!r}"
        raise TypeError(msg)

    before, after = _gap_neighbours(siblings, gap, exclude)
    return priority_between(
        before.priority if before is not None else None,
        after.priority if after is not None else None,
    )


def is_descendant(nodes: Sequence[Node], ancestor_id: str, node_id: str) -> bool:
    """Check whether node_id is ancestor_id itself or lies in its subtree."""
    todo = [ancestor_id]
    seen: set[str] = set()
    while todo:
        current = todo.pop()
        if current == node_id:
            return True
        if current in seen:
            continue
        seen.add(current)
        todo.extend(child.id for child in children_of(nodes, current))
    return False


def reparent(
    nodes: Sequence[Node],
    source_id: str,
    new_parent_id: str,
    hint: PositionHint,
) -> Placement | None:
    """Compute where a node lands when moved under a new parent.

    Returns None when the move is illegal: the source or the new parent does
    not exist, or the new parent is the source or one of its descendants.
    """
    if find_node(nodes, source_id) is None:
        logger.debug("Rejecting move of missing node {}", source_id)
        return None
    if new_parent_id != ROOT_ID and find_node(nodes, new_parent_id) is None:
        logger.debug("Rejecting move of {} under missing parent {}", source_id, new_parent_id)
        return None
    if is_descendant(nodes, source_id, new_parent_id):
        logger.debug("Rejecting move of {} into its own subtree ({})", source_id, new_parent_id)
        return None

    siblings = children_of(nodes, new_parent_id)
    priority = priority_for(siblings, hint, exclude=source_id)
    return Placement(parent_id=new_parent_id, priority=priority)


def apply_placement(repo: NodeRepository, node_id: str, placement: Placement) -> Node | None:
    return repo.update(node_id, parent_id=placement.parent_id, priority=placement.priority)


def move_node(
    repo: NodeRepository,
    source_id: str,
    new_parent_id: str,
    hint: PositionHint,
) -> Node | None:
    """Validate and apply a move in one repository call.

    Returns the moved node, or None when nothing happened.
    """
    placement = reparent(repo.all(), source_id, new_parent_id, hint)
    if placement is None:
        return None
    logger.debug(
        "Moving {} under {} at priority {}", source_id, placement.parent_id, placement.priority
    )
    return apply_placement(repo, source_id, placement)


def needs_rebalance(siblings: Sequence[Node], *, min_gap: float = REBALANCE_MIN_GAP) -> bool:
    """Check whether any gap between ordered siblings has become too small.

    A gap is too small when it is under ``min_gap`` or when its midpoint can
    no longer be told apart from either end.
    """
    for prev, nxt in zip(siblings, siblings[1:]):
        if nxt.priority - prev.priority < min_gap:
            return True
        mid = priority_between(prev.priority, nxt.priority)
        if mid in (prev.priority, nxt.priority):
            return True
    return False


def rebalance(repo: NodeRepository, parent_id: str) -> int:
    """Respace a parent's children to evenly spaced integer priorities.

    Keeps the current order. Returns the number of nodes whose priority changed.
    """
    changed = 0
    for i, child in enumerate(children_of(repo.all(), parent_id)):
        priority = PRIORITY_INCREMENT * (i + 1)
        if child.priority != priority:
            repo.update(child.id, priority=priority)
            changed += 1
    logger.info("Rebalanced children of {}: {} priorities changed", parent_id, changed)
    return changed
