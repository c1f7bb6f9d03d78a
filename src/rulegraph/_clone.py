"""Deep-clone a subtree with fresh identifiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from ._model import OperatorNode, StructureNode, new_node_id

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from ._model import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CloneResult:
    """Cloned nodes plus the mapping used to rename them.

    Attributes:
        nodes: The clones, in input order.
        id_map: Original id to fresh id, one entry per input node.
        new_root_id: Fresh id of the cloned subtree root.

    """

    nodes: tuple[Node, ...]
    id_map: dict[str, str]
    new_root_id: str

    @property
    def root(self) -> Node:
        return next(node for node in self.nodes if node.id == self.new_root_id)


def remap_node(node: Node, id_map: Mapping[str, str]) -> Node:
    """Rename a node and every reference to a renamed node.

    References to ids outside `id_map` are kept as they are; for the subtree
    root that is the parent it was cloned from.
    """
    changes: dict[str, object] = {"id": id_map.get(node.id, node.id)}
    if node.parent_id is not None:
        changes["parent_id"] = id_map.get(node.parent_id, node.parent_id)
    if isinstance(node, OperatorNode | StructureNode):
        changes["cells"] = tuple(
            replace(cell, branch_id=id_map[cell.branch_id]) if cell.branch_id in id_map else cell
            for cell in node.cells
        )
    return replace(node, **changes)  # type: ignore[arg-type]


def clone_subtree(
    nodes: Iterable[Node],
    root_id: str,
    new_id: Callable[[], str] = new_node_id,
) -> CloneResult:
    """Clone `nodes` (a subtree rooted at `root_id`) with fresh identifiers.

    Args:
        nodes: The subtree root and its descendants.
        root_id: Id of the subtree root among `nodes`.
        new_id: Identifier factory.

    Returns:
        An isomorphic copy sharing no identifier with the input.

    Raises:
        KeyError: If `root_id` is not among `nodes`.

    """
    originals = list(nodes)
    id_map = {node.id: new_id() for node in originals}
    if root_id not in id_map:
        raise KeyError(root_id)
    clones = tuple(remap_node(node, id_map) for node in originals)
    logger.debug("Cloned %d nodes from %s", len(clones), root_id)
    return CloneResult(nodes=clones, id_map=id_map, new_root_id=id_map[root_id])
