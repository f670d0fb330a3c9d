"""
DAG Module

Graph construction from edge lists, node registry, and topology analysis.
"""

from .node import Node, Item
from .guard import IterationGuard
from .registry import NodeRegistry
from .builder import GraphBuilder, DEFAULT_ARROW
from .topology import (
    RegionScan,
    SortResult,
    SortStatus,
    TopologyResult,
    analyze,
    find_regions,
    sort_region,
)

__all__ = [
    "Node",
    "Item",
    "IterationGuard",
    "NodeRegistry",
    "GraphBuilder",
    "DEFAULT_ARROW",
    "RegionScan",
    "SortResult",
    "SortStatus",
    "TopologyResult",
    "analyze",
    "find_regions",
    "sort_region",
]
