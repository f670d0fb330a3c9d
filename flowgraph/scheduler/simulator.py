"""
Flow Simulator

Advances discrete items along node queues, one step at a time.
Each node is updated in registry order with three phases:
head transfer to a successor, internal slide, accept from a predecessor.
"""

from itertools import count
from typing import Dict, List, Optional, Set
import logging

from ..config.loader import SimulationConfig
from ..dag.node import Item, Node
from ..dag.registry import NodeRegistry

logger = logging.getLogger(__name__)


class FlowSimulator:
    """
    Steps item flow over a node registry.

    Updates are sequential: a node sees queue states as already mutated by
    nodes processed earlier in the same step. Successor and predecessor
    selection rotates through neighbors using each node's round-robin
    cursors, which persist across steps. A node receives at most one item
    per step.

    Example usage:
        registry = GraphBuilder().build("A -> B\\nA -> C")
        simulator = FlowSimulator(registry, SimulationConfig(min_spacing=0.3))

        simulator.seed(registry.find("A").id)
        for _ in range(100):
            simulator.step(0.05)

        print(simulator.snapshot())  # {node_id: [positions, head first]}
    """

    def __init__(self, registry: NodeRegistry, settings: Optional[SimulationConfig] = None):
        """
        Initialize simulator.

        Args:
            registry: Graph to simulate; queues are mutated in place
            settings: Speed, spacing and clamping parameters
        """
        self.registry = registry
        self.settings = settings or SimulationConfig()
        self.tick = 0
        self._item_ids = count()
        # node ids that already received an item during the current step
        self._arrived: Set[int] = set()

        logger.info(
            f"Initialized FlowSimulator with {len(registry)} nodes, "
            f"speed={self.settings.speed}, min_spacing={self.settings.min_spacing}"
        )

    def seed(self, node_id: int, dist: float = 0.0, force: bool = False) -> Optional[Item]:
        """
        Place a new item at the tail of a node's queue.

        The item is placed only if the queue is empty or the node's tail is at
        least min_spacing ahead of dist, unless force is set.

        Args:
            node_id: Node receiving the item
            dist: Starting position in [0, 1)
            force: Skip the spacing check

        Returns:
            The new Item, or None if spacing did not allow it

        Raises:
            UnknownNodeReference: If node_id is not registered
            ValueError: If dist is outside [0, 1)
        """
        node = self.registry.get(node_id)
        if not 0.0 <= dist < 1.0:
            raise ValueError(f"dist must be in [0, 1), got {dist}")

        tail = node.tail
        if not force and tail is not None and tail.dist - dist < self.settings.min_spacing:
            return None

        item = Item(id=next(self._item_ids), dist=dist)
        node.queue.append(item)
        logger.debug(f"Seeded item {item.id} at node '{node.name}' dist={dist}")
        return item

    def step(self, dt: float) -> None:
        """
        Advance every node by one interval.

        Args:
            dt: Non-negative duration of the step

        Raises:
            ValueError: If dt is negative
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        self._arrived.clear()
        for node in self.registry:
            self._move_to_successor(node, dt)
            self._slide_within(node, dt)
            self._accept_from_predecessor(node, dt)

        self.tick += 1

    def _future(self, item: Item, dt: float) -> float:
        """Prospective position after this step, without wraparound"""
        return item.dist + self.settings.speed * dt

    def _has_spacing(self, ahead: Optional[Item], future: float) -> bool:
        """True if an item arriving at future % 1 keeps min_spacing behind ahead"""
        if ahead is None:
            return True
        return ahead.dist - (future % 1.0) >= self.settings.min_spacing

    def _clamp(self, value: float) -> float:
        eps = self.settings.epsilon
        return min(max(value, eps), 1.0 - eps)

    def _next_successor(self, node: Node, future: float) -> Optional[int]:
        """
        Index of the first successor, in round-robin order after
        last_out_index, that can take an item arriving at future % 1.
        Successors that already received an item this step are passed over.

        Returns:
            Index into node.successors, or None if no successor has room
        """
        n_out = len(node.successors)
        for offset in range(1, n_out + 1):
            index = (node.last_out_index + offset) % n_out
            succ = self.registry.get(node.successors[index])
            if succ.id in self._arrived:
                continue
            if self._has_spacing(succ.tail, future):
                return index
        return None

    def _hand_over(self, sender: Node, receiver: Node, future: float) -> Item:
        """Move sender's head to receiver's tail, carrying the wrapped remainder"""
        item = sender.queue.pop(0)
        item.dist = future % 1.0
        receiver.queue.append(item)

        sender.sent += 1
        receiver.received += 1
        self._arrived.add(receiver.id)
        return item

    def _move_to_successor(self, node: Node, dt: float) -> None:
        """
        Phase (a): hand the head item to the next eligible successor.

        The head advances in place while it has not reached the node boundary,
        and waits clamped below 1 when no successor can take it.
        """
        if not node.queue:
            return

        future = self._future(node.queue[0], dt)

        if future >= 1.0:
            if not node.successors and self.settings.drain_sinks:
                item = node.queue.pop(0)
                node.delivered += 1
                logger.debug(f"Item {item.id} delivered at sink '{node.name}'")
                return

            index = self._next_successor(node, future)
            if index is not None:
                succ = self.registry.get(node.successors[index])
                self._hand_over(node, succ, future)
                node.last_out_index = index
                return

        node.queue[0].dist = self._clamp(future)

    def _slide_within(self, node: Node, dt: float) -> None:
        """
        Phase (b): advance trailing items that keep spacing behind the item ahead.

        Items behind the head never cross the node boundary in this phase.
        """
        queue = node.queue
        for i in range(1, len(queue)):
            future = self._future(queue[i], dt)
            if self._has_spacing(queue[i - 1], future):
                queue[i].dist = min(future, 1.0 - self.settings.epsilon)

    def _accept_from_predecessor(self, node: Node, dt: float) -> None:
        """
        Phase (c): pull one ready head item from the next eligible predecessor.

        Only this node's last_inp_index moves; the sender's successor cursor
        is left as it was. Skipped when this node already received an item
        during the current step.
        """
        if node.id in self._arrived:
            return

        n_inp = len(node.predecessors)
        for offset in range(1, n_inp + 1):
            index = (node.last_inp_index + offset) % n_inp
            pred = self.registry.get(node.predecessors[index])

            if not pred.queue:
                continue

            future = self._future(pred.queue[0], dt)
            if future < 1.0 or not self._has_spacing(node.tail, future):
                continue

            self._hand_over(pred, node, future)
            node.last_inp_index = index
            return

    def snapshot(self) -> Dict[int, List[float]]:
        """
        Current item positions.

        Returns:
            Mapping of node id to queue positions, head first
        """
        return {node.id: [item.dist for item in node.queue] for node in self.registry}

    def item_count(self) -> int:
        return sum(len(node.queue) for node in self.registry)

    def delivered_count(self) -> int:
        return sum(node.delivered for node in self.registry)
