"""Ordering and reachability algorithms over ownership graphs."""

from collections import deque
from collections.abc import Hashable, Mapping, Sequence
from typing import TypeVar

T = TypeVar("T", bound=Hashable)


def parents_first_order(children: Mapping[T, Sequence[T]]) -> list[T]:
    """Order nodes so that every parent precedes its children.

    Nodes with no incoming edge come first, in mapping order; siblings keep
    their slot order.

    Args:
        children: Mapping from node to its ordered children. An edge
            (a -> b) means "a owns b".

    Returns:
        List of all nodes, parents before children.

    Raises:
        ValueError: If the graph contains a cycle. The message names the
            nodes that could not be ordered.

    Example:
        >>> parents_first_order({"root": ["a", "b"], "a": [], "b": []})
        ['root', 'a', 'b']

    """
    indegree: dict[T, int] = {}
    for node, kids in children.items():
        indegree.setdefault(node, 0)
        for kid in kids:
            indegree[kid] = indegree.get(kid, 0) + 1

    queue = deque(node for node, degree in indegree.items() if degree == 0)
    order: list[T] = []
    while queue:
        node = queue.popleft()
        order.append(node)
        for kid in children.get(node, ()):
            indegree[kid] -= 1
            if indegree[kid] == 0:
                queue.append(kid)

    if len(order) != len(indegree):
        stuck = sorted(str(node) for node, degree in indegree.items() if degree > 0)
        msg = f"Cycle detected among nodes: {', '.join(stuck)}"
        raise ValueError(msg)
    return order


def reachable(children: Mapping[T, Sequence[T]], start: T) -> list[T]:
    """Collect every node reachable from `start`, in depth-first pre-order.

    `start` itself is not included. Each node is visited once, so the walk
    terminates on corrupted (cyclic or shared) references.
    """
    seen: set[T] = {start}
    order: list[T] = []
    stack = list(reversed(children.get(start, ())))
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        order.append(current)
        stack.extend(reversed(children.get(current, ())))
    return order
