"""Graph module providing the ownership graph over layout edges.

This module contains:
- EdgeGraph[T]: A generic, immutable "parent owns child" graph
- parents_first_order: Ordering with every parent before its children
- reachable: Cycle-safe pre-order reachability
"""

from ._algorithms import parents_first_order, reachable
from ._edge_graph import EdgeGraph

__all__ = ["EdgeGraph", "parents_first_order", "reachable"]
