"""
Topology and Flow Report Schemas

Dataclasses for analysis results and simulation snapshots.
Node ids are resolved to names so reports stay readable after a rebuild.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List

from flowgraph.dag.registry import NodeRegistry
from flowgraph.dag.topology import TopologyResult


@dataclass
class TopologyReport:
    """
    One region and its sinks-first order, by node name.

    Used for logging analysis results and feeding dashboards.
    """
    id: int
    region: List[str]
    sorted: List[str]
    status: str
    reason: str = ""
    region_truncated: bool = False

    @classmethod
    def from_result(cls, result: TopologyResult, registry: NodeRegistry) -> "TopologyReport":
        """Build a report from an analysis result."""
        return cls(
            id=result.id,
            region=[registry.get(node_id).name for node_id in result.region],
            sorted=[registry.get(node_id).name for node_id in result.sorted.order],
            status=result.sorted.status.value,
            reason=result.sorted.reason,
            region_truncated=result.region_truncated,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "region": list(self.region),
            "sorted": list(self.sorted),
            "status": self.status,
            "reason": self.reason,
            "region_truncated": self.region_truncated,
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "TopologyReport":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            region=list(data["region"]),
            sorted=list(data["sorted"]),
            status=data["status"],
            reason=data.get("reason", ""),
            region_truncated=data.get("region_truncated", False),
        )


@dataclass
class FlowSnapshot:
    """Item positions of every node after a step"""
    tick: int
    queues: Dict[str, List[float]] = field(default_factory=dict)  # node name -> positions, head first

    @classmethod
    def capture(cls, tick: int, registry: NodeRegistry) -> "FlowSnapshot":
        return cls(
            tick=tick,
            queues={node.name: [item.dist for item in node.queue] for node in registry},
        )

    @property
    def item_count(self) -> int:
        return sum(len(positions) for positions in self.queues.values())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "tick": self.tick,
            "queues": {name: list(positions) for name, positions in self.queues.items()},
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "FlowSnapshot":
        """Create from dictionary."""
        return cls(tick=data["tick"], queues={k: list(v) for k, v in data["queues"].items()})
