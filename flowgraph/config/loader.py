"""
Config Loader

Loads graph configurations from YAML files.
Each file holds an edge list plus parser, simulation and analysis settings.
"""

import yaml
from pathlib import Path
from typing import List
from pydantic import BaseModel, Field, ValidationError, field_validator
import logging

from ..dag.builder import DEFAULT_ARROW
from ..dag.topology import REGION_MAX_ITERATIONS, SORT_MAX_ITERATIONS

logger = logging.getLogger(__name__)

DEMO_EDGES = """start -> 0
0 -> 1
1 -> A
A -> B
B -> C
C -> 0"""


class ParserConfig(BaseModel):
    """Edge-list parsing options"""
    arrow: str = DEFAULT_ARROW
    strict: bool = False

    @field_validator("arrow")
    @classmethod
    def _arrow_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("arrow must contain a non-whitespace token")
        return value


class SimulationConfig(BaseModel):
    """Item flow parameters"""
    speed: float = Field(default=1.0, gt=0)
    min_spacing: float = Field(default=0.3, ge=0, lt=1)
    epsilon: float = Field(default=1e-3, gt=0, lt=0.5)
    drain_sinks: bool = False
    sources: List[str] = Field(default_factory=list)  # node names fed one item per step when spacing allows


class AnalysisConfig(BaseModel):
    """Iteration ceilings for topology analysis"""
    region_max_iterations: int = Field(default=REGION_MAX_ITERATIONS, ge=0)
    sort_max_iterations: int = Field(default=SORT_MAX_ITERATIONS, ge=0)


class GraphConfig(BaseModel):
    """Complete configuration for one graph"""
    name: str = "demo"
    edges: str = ""
    parser: ParserConfig = Field(default_factory=ParserConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    @classmethod
    def demo(cls) -> "GraphConfig":
        """Built-in demo graph: a start node feeding a five node cycle"""
        return cls(name="demo", edges=DEMO_EDGES, simulation=SimulationConfig(sources=["start"]))


class ConfigLoader:
    """
    Loads graph configs from YAML.

    Layout:
        {config_dir}/graphs/{name}.yaml

    Example usage:
        loader = ConfigLoader(Path("config"))
        config = loader.load_graph("demo")

        registry = GraphBuilder(config.parser.arrow, config.parser.strict).build(config.edges)
    """

    def __init__(self, config_dir: Path):
        """
        Initialize loader with config directory.

        Args:
            config_dir: Root config directory (contains graphs/ subdirectory)
        """
        self.config_dir = Path(config_dir)
        logger.info(f"Initialized ConfigLoader with config_dir: {self.config_dir}")

    @property
    def graphs_dir(self) -> Path:
        return self.config_dir / "graphs"

    def list_graphs(self) -> List[str]:
        """
        List available graph names.

        Returns:
            Sorted list of YAML file stems under graphs/
        """
        if not self.graphs_dir.exists():
            return []
        return sorted(path.stem for path in self.graphs_dir.glob("*.yaml"))

    def load_graph(self, name: str) -> GraphConfig:
        """
        Load one graph config.

        Args:
            name: Graph name (file stem under graphs/)

        Returns:
            Validated GraphConfig

        Raises:
            ValueError: If the file is missing, not valid YAML, or fails validation
        """
        path = self.graphs_dir / f"{name}.yaml"

        if not path.exists():
            available = ", ".join(self.list_graphs())
            raise ValueError(
                f"No config for graph: {name}. Expected: {path}. "
                f"Available graphs: {available if available else 'none'}"
            )

        try:
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            config = GraphConfig(**raw)
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            logger.error(f"Failed to load {path}: {e}")
            raise ValueError(f"Failed to load {path}: {e}") from e

        if config.name != name:
            logger.warning(
                f"Name mismatch in {path.name}: expected {name}, got {config.name}"
            )

        logger.info(
            f"Loaded graph config {name}: {len(config.edges.splitlines())} edge lines, "
            f"sources={config.simulation.sources}"
        )
        return config
