"""
Runtime Module

Flow coordinator and runtime entry point.
"""

from .coordinator import FlowCoordinator

__all__ = [
    "FlowCoordinator",
]
