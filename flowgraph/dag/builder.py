"""
Graph Builder

Builds a node registry from a textual edge list.
Two passes: create one node per distinct label, then mirror every edge
into successor/predecessor adjacency.
"""

from itertools import count
from typing import Iterable, List, Optional, Tuple
import logging

from .node import Node
from .registry import NodeRegistry
from ..errors import MalformedEdgeLine

logger = logging.getLogger(__name__)

DEFAULT_ARROW = " -> "


class GraphBuilder:
    """
    Builds node registries from edge-list text.

    The builder:
    1. Splits the text into lines, parsing each as "SRC -> DST"
    2. Creates one node per distinct label (first occurrence wins the id)
    3. Adds DST to SRC.successors and SRC to DST.predecessors

    Node ids are drawn from a counter owned by the builder, so a rebuild
    never reuses ids handed out by a previous build.

    Example usage:
        builder = GraphBuilder()
        registry = builder.build("A -> B\\nA -> C\\nB -> C")

        print(registry.list_nodes())  # [(0, "A"), (1, "B"), (2, "C")]
        print(registry.relations(0))  # ([], [1, 2])
    """

    def __init__(self, arrow: str = DEFAULT_ARROW, strict: bool = False):
        """
        Initialize builder.

        Args:
            arrow: Separator between the two labels of an edge line
            strict: Raise on the first malformed line instead of skipping it
        """
        if not arrow or not arrow.strip():
            raise ValueError("arrow must contain a non-whitespace token")

        self.arrow = arrow
        self.strict = strict
        self._ids = count()

    def build(self, edge_text: str) -> NodeRegistry:
        """
        Build a registry from edge-list text.

        Args:
            edge_text: Newline-separated lines of the form "SRC -> DST"

        Returns:
            NodeRegistry with mirrored adjacency

        Raises:
            MalformedEdgeLine: In strict mode, on the first line that does
                              not split into exactly two labels
        """
        registry = NodeRegistry()

        if not edge_text or not edge_text.strip():
            logger.warning("Node relation is empty, built empty registry")
            return registry

        edges = self._parse_lines(edge_text, registry)
        self._populate(registry, edges)

        logger.info(
            f"Built graph: {len(registry)} nodes, {registry.edge_count()} edges, "
            f"{len(registry.rejected_lines)} rejected lines"
        )
        return registry

    def build_from_edges(self, edges: Iterable[Tuple[str, str]]) -> NodeRegistry:
        """
        Build a registry from (src, dst) label pairs.

        Args:
            edges: Iterable of (source label, destination label)

        Returns:
            NodeRegistry with mirrored adjacency
        """
        pairs = []
        for src, dst in edges:
            src, dst = str(src).strip(), str(dst).strip()
            if not src or not dst:
                raise ValueError(f"Edge labels must be non-empty: ({src!r}, {dst!r})")
            pairs.append((src, dst))

        registry = NodeRegistry()
        self._populate(registry, pairs)
        logger.info(f"Built graph: {len(registry)} nodes, {registry.edge_count()} edges")
        return registry

    def _parse_lines(self, edge_text: str, registry: NodeRegistry) -> List[Tuple[str, str]]:
        """
        Parse every non-blank line into a (src, dst) pair.

        Malformed lines are recorded on the registry and skipped, or raised
        in strict mode.
        """
        edges = []
        for line_number, raw in enumerate(edge_text.split("\n"), start=1):
            line = raw.strip()
            if not line:
                continue

            pair = self._parse_line(line)
            if pair is None:
                error = MalformedEdgeLine(line_number, line, self.arrow)
                if self.strict:
                    logger.error(str(error))
                    raise error
                logger.warning(f"Skipping {error}")
                registry.rejected_lines.append(error)
                continue

            edges.append(pair)

        logger.debug(f"Parsed {len(edges)} edges")
        return edges

    def _parse_line(self, line: str) -> Optional[Tuple[str, str]]:
        labels = [label.strip() for label in line.split(self.arrow)]
        if len(labels) != 2 or not all(labels):
            return None
        return labels[0], labels[1]

    def _populate(self, registry: NodeRegistry, edges: List[Tuple[str, str]]) -> None:
        """
        Create nodes, then mirror adjacency.

        Args:
            registry: Registry to fill (modified in place)
            edges: Parsed (src, dst) label pairs
        """
        # Pass 1: one node per distinct label
        for src, dst in edges:
            for name in (src, dst):
                if registry.find(name) is None:
                    registry.add(Node(id=next(self._ids), name=name))

        # Pass 2: mirrored adjacency
        for src, dst in edges:
            node_a = registry.find(src)
            node_b = registry.find(dst)
            node_a.add_successor(node_b.id)
            node_b.add_predecessor(node_a.id)

        logger.debug(f"Adjacency: {[(n.name, n.successors) for n in registry]}")
