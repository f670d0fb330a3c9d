"""
Topology Analysis

Partitions a graph into weakly connected regions and computes a
sinks-first topological order per region.

Both traversals run under an IterationGuard so that ad hoc graph input can
never hang the caller; an exhausted guard yields a partial result with a flag
instead of an exception.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import logging

from .guard import IterationGuard
from .registry import NodeRegistry

logger = logging.getLogger(__name__)

REGION_MAX_ITERATIONS = 10_000
SORT_MAX_ITERATIONS = 100_000


class SortStatus(Enum):
    """Outcome of sorting one region"""
    COMPLETE = "complete"
    PARTIAL = "partial"  # cycle residue left after peeling
    UNSORTABLE = "unsortable"  # no zero out-degree node to start from
    TRUNCATED = "truncated"  # iteration ceiling reached


@dataclass
class RegionScan:
    """
    Result of region detection.

    Attributes:
        regions: Lists of node ids, one per weakly connected region
        truncated: True if the iteration ceiling cut the scan short
    """
    regions: List[List[int]] = field(default_factory=list)
    truncated: bool = False


@dataclass
class SortResult:
    """
    Sinks-first order of one region.

    An empty order with status UNSORTABLE means the region has no node
    without successors; it does not mean the region is empty.
    """
    order: List[int]
    region_size: int
    status: SortStatus
    reason: str = ""

    @property
    def complete(self) -> bool:
        return self.status == SortStatus.COMPLETE

    @property
    def unsortable(self) -> bool:
        return self.status == SortStatus.UNSORTABLE


@dataclass
class TopologyResult:
    """A region paired with its sort result"""
    id: int
    region: List[int]
    sorted: SortResult
    region_truncated: bool = False


def find_regions(
    registry: NodeRegistry,
    max_iterations: float = REGION_MAX_ITERATIONS,
    guard: Optional[IterationGuard] = None,
) -> RegionScan:
    """
    Partition the graph into weakly connected regions.

    Flood fill ignoring edge direction. Neighbors are enqueued without
    checking their explored flag; the check happens when they are popped,
    so a node may sit in the frontier more than once.

    Args:
        registry: Node registry to scan
        max_iterations: Ceiling for the whole call (ignored if guard is given)
        guard: Iteration budget to use instead of a fresh one

    Returns:
        RegionScan covering every node exactly once, unless truncated
    """
    guard = guard or IterationGuard(max_iterations, label="regions")
    explored: Dict[int, bool] = {node_id: False for node_id in registry.ids()}
    scan = RegionScan()

    while True:
        if guard.tick():
            break

        seed = next((node_id for node_id, done in explored.items() if not done), None)
        if seed is None:
            break

        frontier = deque([seed])
        region: List[int] = []

        while frontier:
            if guard.tick():
                break

            node_id = frontier.popleft()
            if explored[node_id]:
                continue

            explored[node_id] = True
            region.append(node_id)

            node = registry.get(node_id)
            frontier.extend(node.predecessors)
            frontier.extend(node.successors)

        scan.regions.append(region)

        if guard.exceeded:
            break

    scan.truncated = guard.exceeded
    logger.debug(
        f"Found {len(scan.regions)} regions "
        f"(sizes {[len(r) for r in scan.regions]}, truncated={scan.truncated})"
    )
    return scan


def sort_region(
    region: List[int],
    registry: NodeRegistry,
    max_iterations: float = SORT_MAX_ITERATIONS,
    guard: Optional[IterationGuard] = None,
) -> SortResult:
    """
    Compute a sinks-first topological order using Kahn's algorithm.

    Algorithm:
    1. Out-degree of each node = number of successors
    2. Start with nodes that have out-degree 0
    3. Pop a node, append it, decrement each predecessor's out-degree
    4. Enqueue predecessors whose out-degree reaches exactly 0

    For every edge A -> B inside a fully sorted region, B comes before A.

    Args:
        region: Node ids of one weakly connected region
        registry: Registry resolving the ids
        max_iterations: Ceiling for the peeling loop (ignored if guard is given)
        guard: Iteration budget to use instead of a fresh one

    Returns:
        SortResult; compare len(order) with region_size to detect cycles
    """
    out_degree: Dict[int, int] = {
        node_id: len(registry.get(node_id).successors) for node_id in region
    }

    frontier = deque(node_id for node_id, degree in out_degree.items() if degree == 0)
    if not frontier:
        logger.info(f"No zero out-degree node found in region of {len(region)} nodes")
        return SortResult(
            order=[],
            region_size=len(region),
            status=SortStatus.UNSORTABLE,
            reason="no node without successors",
        )

    guard = guard or IterationGuard(max_iterations, label="sort")
    order: List[int] = []

    while frontier:
        if guard.tick():
            return SortResult(
                order=order,
                region_size=len(region),
                status=SortStatus.TRUNCATED,
                reason=f"iteration ceiling {guard.max_iterations:g} reached",
            )

        node_id = frontier.popleft()
        order.append(node_id)

        for pred_id in registry.get(node_id).predecessors:
            # region may be partial if the region scan was truncated
            if pred_id not in out_degree:
                continue
            out_degree[pred_id] -= 1
            if out_degree[pred_id] == 0:
                frontier.append(pred_id)

    if len(order) < len(region):
        logger.info(
            f"Incomplete region: sorted {len(order)} of {len(region)} nodes"
        )
        return SortResult(
            order=order,
            region_size=len(region),
            status=SortStatus.PARTIAL,
            reason=f"{len(region) - len(order)} nodes on or upstream of a cycle",
        )

    return SortResult(order=order, region_size=len(region), status=SortStatus.COMPLETE)


def analyze(
    registry: NodeRegistry,
    region_max_iterations: float = REGION_MAX_ITERATIONS,
    sort_max_iterations: float = SORT_MAX_ITERATIONS,
) -> List[TopologyResult]:
    """
    Find all regions and sort each one.

    Args:
        registry: Node registry to analyze
        region_max_iterations: Ceiling for region detection
        sort_max_iterations: Ceiling for each region's sort

    Returns:
        One TopologyResult per region, ids numbered from 0
    """
    scan = find_regions(registry, max_iterations=region_max_iterations)

    results = [
        TopologyResult(
            id=index,
            region=region,
            sorted=sort_region(region, registry, max_iterations=sort_max_iterations),
            region_truncated=scan.truncated,
        )
        for index, region in enumerate(scan.regions)
    ]

    logger.info(
        f"Analyzed {len(registry)} nodes: {len(results)} regions, "
        f"{sum(1 for r in results if r.sorted.complete)} fully sorted"
        + (" (region scan truncated)" if scan.truncated else "")
    )
    return results
