"""
Node Registry

Arena of graph nodes addressed by integer id.
Provides the read-only query surface used by visualizers.
"""

from typing import Dict, Iterator, List, Optional, Tuple
import logging

from .node import Node
from ..errors import MalformedEdgeLine, UnknownNodeReference

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Registry of graph nodes keyed by id.

    The registry owns every Node. Nodes reference each other only through
    ids stored in predecessors/successors, so the registry is the single
    place where ids are resolved. Iteration follows creation order.

    Example usage:
        registry = GraphBuilder().build("A -> B\\nB -> C")

        for node_id, name in registry.list_nodes():
            preds, succs = registry.relations(node_id)
            print(name, preds, succs)
    """

    def __init__(self):
        """Initialize empty registry"""
        self._nodes: Dict[int, Node] = {}
        self._by_name: Dict[str, int] = {}
        self.rejected_lines: List[MalformedEdgeLine] = []
        logger.debug("Initialized NodeRegistry")

    def add(self, node: Node) -> None:
        """
        Add a node to the registry.

        Args:
            node: Node to add

        Raises:
            ValueError: If the id or the name is already registered
        """
        if node.id in self._nodes:
            raise ValueError(f"Duplicate node id: {node.id}")
        if node.name in self._by_name:
            raise ValueError(f"Duplicate node name: {node.name!r}")

        self._nodes[node.id] = node
        self._by_name[node.name] = node.id

    def get(self, node_id: int) -> Node:
        """
        Resolve a node id.

        Raises:
            UnknownNodeReference: If node_id is not registered
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeReference(node_id) from None

    def find(self, name: str) -> Optional[Node]:
        """Look up a node by label, or None if no node has that name"""
        node_id = self._by_name.get(name)
        return self._nodes[node_id] if node_id is not None else None

    def ids(self) -> List[int]:
        return list(self._nodes.keys())

    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def list_nodes(self) -> List[Tuple[int, str]]:
        """
        List all nodes.

        Returns:
            List of (id, name) tuples in creation order
        """
        return [(node.id, node.name) for node in self._nodes.values()]

    def relations(self, node_id: int) -> Tuple[List[int], List[int]]:
        """
        Get adjacency of a node.

        Args:
            node_id: Node identifier

        Returns:
            Tuple of (predecessor_ids, successor_ids)

        Raises:
            UnknownNodeReference: If node_id is not registered
        """
        node = self.get(node_id)
        return list(node.predecessors), list(node.successors)

    def edge_count(self) -> int:
        return sum(len(node.successors) for node in self._nodes.values())

    def to_table(self) -> str:
        """Render every node as one line of text"""
        return "\n".join(str(node) for node in self._nodes.values())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())
