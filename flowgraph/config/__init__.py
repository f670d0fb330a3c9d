"""
Config Module

YAML graph configuration loading and validation.
"""

from .loader import (
    ConfigLoader,
    GraphConfig,
    ParserConfig,
    SimulationConfig,
    AnalysisConfig,
)

__all__ = [
    "ConfigLoader",
    "GraphConfig",
    "ParserConfig",
    "SimulationConfig",
    "AnalysisConfig",
]
