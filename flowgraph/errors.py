"""
Flow Graph Errors

Exceptions raised at the build/query boundary.
Analysis outcomes (unsortable regions, truncated traversals) are reported
as result statuses, not exceptions.
"""


class FlowGraphError(Exception):
    """Base class for flow graph errors"""


class MalformedEdgeLine(FlowGraphError, ValueError):
    """
    An edge-list line that does not split into exactly two labels.

    Attributes:
        line_number: 1-based line number in the source text
        line: Raw line content
    """

    def __init__(self, line_number: int, line: str, arrow: str = " -> "):
        self.line_number = line_number
        self.line = line
        self.arrow = arrow
        super().__init__(
            f"Malformed edge line {line_number}: {line!r} "
            f"(expected 'SRC{arrow}DST')"
        )


class UnknownNodeReference(FlowGraphError, LookupError):
    """A node id that is not present in the registry"""

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"Unknown node id: {node_id}")
