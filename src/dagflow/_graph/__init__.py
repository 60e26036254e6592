"""Graph module providing the dataflow node registry.

This module contains:
- GraphRegistry: Append-only registry of node functions and dependency edges
- NodeSpec / NodeKind: Description of a single node
- Graph algorithms: edge walking with cycle detection, dirty counting,
  topological sorting
"""

from ._algorithms import count_incoming_edges, find_cycle, topological_sort, walk_edges
from ._node_spec import NodeKind, NodeSpec, derive_dependencies
from ._registry import GraphRegistry

__all__ = [
    "GraphRegistry",
    "NodeKind",
    "NodeSpec",
    "count_incoming_edges",
    "derive_dependencies",
    "find_cycle",
    "topological_sort",
    "walk_edges",
]
