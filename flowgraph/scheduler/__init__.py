"""
Scheduler Module

Per-step item flow simulation over the node registry.
"""

from .simulator import FlowSimulator

__all__ = [
    "FlowSimulator",
]
