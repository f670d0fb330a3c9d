"""
Flow Graph Engine

Directed graph model, topology analysis and discrete item-flow simulation.
Contains:
- dag: edge-list parsing, node registry, region and topological analysis
- scheduler: per-tick item flow simulation
- config: YAML graph configuration loading
- runtime: coordinator and entry point
"""
