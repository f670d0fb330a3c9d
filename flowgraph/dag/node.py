"""
Graph Node Model

Defines the core data structures for graph nodes and the items flowing through them.
Nodes live in an arena (NodeRegistry) and reference each other by integer id only.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(eq=False)
class Item:
    """
    A discrete unit travelling through the graph.

    Attributes:
        id: Identifier assigned by the simulator that created the item
        dist: Normalized position along the current node, in [0, 1).
              0 = just arrived, approaching 1 = ready to leave.
    """
    id: int
    dist: float = 0.0


@dataclass(eq=False)
class Node:
    """
    A graph node with mirrored adjacency and an item queue.

    Identity is the integer id: equality and hashing use it exclusively.
    predecessors/successors hold node ids in insertion order without duplicates,
    which keeps the round-robin cursors meaningful across ticks.

    Attributes:
        id: Unique identifier, stable for the node's lifetime
        name: Label from the edge list
        predecessors: Ids of nodes with an edge into this node (INP)
        successors: Ids of nodes this node has an edge to (OUT)
        queue: Items currently on this node, head (closest to leaving) first
        last_out_index: Round-robin cursor into successors
        last_inp_index: Round-robin cursor into predecessors
        received: Items accepted from predecessors
        sent: Items handed to successors
        delivered: Items drained at this node (sink draining only)
    """
    id: int
    name: str = ""
    predecessors: List[int] = field(default_factory=list)
    successors: List[int] = field(default_factory=list)
    queue: List[Item] = field(default_factory=list)
    last_out_index: int = 0
    last_inp_index: int = 0
    received: int = 0
    sent: int = 0
    delivered: int = 0

    def __eq__(self, other) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return other.id == self.id

    def __hash__(self) -> int:
        return self.id

    def __str__(self) -> str:
        return (
            f"id: {self.id} name: {self.name} INP: {len(self.predecessors)} "
            f"OUT: {len(self.successors)} Q: {len(self.queue)}"
        )

    def add_successor(self, node_id: int) -> None:
        if node_id not in self.successors:
            self.successors.append(node_id)

    def add_predecessor(self, node_id: int) -> None:
        if node_id not in self.predecessors:
            self.predecessors.append(node_id)

    @property
    def head(self) -> Optional[Item]:
        """Item closest to leaving the node, or None if empty"""
        return self.queue[0] if self.queue else None

    @property
    def tail(self) -> Optional[Item]:
        """Most recently arrived item, or None if empty"""
        return self.queue[-1] if self.queue else None

    @property
    def is_sink(self) -> bool:
        return not self.successors

    @property
    def is_source(self) -> bool:
        return not self.predecessors
