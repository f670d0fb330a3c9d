"""
Report Schemas

JSON-serializable reports for topology analysis and flow snapshots.
"""

from schemas.topology_data import TopologyReport, FlowSnapshot

__all__ = [
    "TopologyReport",
    "FlowSnapshot",
]
