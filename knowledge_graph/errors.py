"""Error types raised (or recovered from) while building and laying out graphs."""


class KnowledgeGraphError(Exception):
    """Base class for knowledge graph errors."""


class MalformedField(KnowledgeGraphError, ValueError):
    """A record field could not be parsed as a list; treated as one raw value."""


class DanglingEdge(KnowledgeGraphError, ValueError):
    """An edge references a node that is not part of the graph."""


class InvalidGraphInput(KnowledgeGraphError, ValueError):
    """The layout engine received a graph that violates its structural contract."""


class InvalidConfig(KnowledgeGraphError, ValueError):
    """A layout or builder configuration value is out of range."""


class LayoutCancelled(KnowledgeGraphError):
    """The caller requested the simulation to stop between iterations."""
