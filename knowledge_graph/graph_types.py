"""
Typed nodes, edges and graphs for research knowledge graphs.

Node and edge kinds are closed enumerations; every type-dependent value
(seed weight, colour, render size) lives in a table keyed by the enum and
is checked for completeness when this module is imported.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from .config import (
    PAPER_SEED_WEIGHT, AUTHOR_SEED_WEIGHT, MATERIAL_SEED_WEIGHT,
    ORGANISM_SEED_WEIGHT, CONCEPT_SEED_WEIGHT, METHOD_SEED_WEIGHT,
    NODE_COLORS, NODE_BASE_SIZES
)


class NodeType(str, Enum):
    """Kinds of entities extracted from paper records."""
    PAPER = 'paper'
    AUTHOR = 'author'
    MATERIAL = 'material'
    ORGANISM = 'organism'
    CONCEPT = 'concept'
    METHOD = 'method'

    @property
    def seed_weight(self) -> float:
        return SEED_WEIGHTS[self]

    @property
    def color(self) -> str:
        return NODE_COLORS[self.value]

    @property
    def base_size(self) -> int:
        return NODE_BASE_SIZES[self.value]


class EdgeType(str, Enum):
    """Kinds of relationships between entities."""
    AUTHORED = 'authored'
    USES_MATERIAL = 'uses_material'
    STUDIES_ORGANISM = 'studies_organism'
    RELATED_TO = 'related_to'
    CITES = 'cites'


SEED_WEIGHTS = {
    NodeType.PAPER: PAPER_SEED_WEIGHT,
    NodeType.AUTHOR: AUTHOR_SEED_WEIGHT,
    NodeType.MATERIAL: MATERIAL_SEED_WEIGHT,
    NodeType.ORGANISM: ORGANISM_SEED_WEIGHT,
    NodeType.CONCEPT: CONCEPT_SEED_WEIGHT,
    NodeType.METHOD: METHOD_SEED_WEIGHT,
}

for _node_type in NodeType:
    if _node_type not in SEED_WEIGHTS:
        raise RuntimeError(f"No seed weight defined for node type: {_node_type.value}")
    if _node_type.value not in NODE_COLORS or _node_type.value not in NODE_BASE_SIZES:
        raise RuntimeError(f"No render hints defined for node type: {_node_type.value}")


Position = Tuple[float, ...]


@dataclass
class Node:
    """A typed graph vertex representing one entity."""
    id: str
    name: str
    type: NodeType
    weight: float
    importance: Optional[float] = None
    position: Optional[Position] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def importance_bonus(self) -> float:
        """Importance used for initial placement; 0 when unset, negative or not finite."""
        if self.importance is None:
            return 0.0
        try:
            value = float(self.importance)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(value) or value < 0:
            return 0.0
        return value

    def with_position(self, position: Position) -> 'Node':
        """Return a copy of this node placed at ``position``."""
        return replace(self, position=tuple(float(c) for c in position),
                       metadata=dict(self.metadata))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'weight': self.weight,
            'color': self.type.color,
        }
        if self.importance is not None:
            data['importance'] = self.importance
        if self.position is not None:
            data['position'] = list(self.position)
        if self.metadata:
            data['metadata'] = dict(self.metadata)
        return data


@dataclass
class Edge:
    """A typed, weighted relationship between two nodes."""
    source: str
    target: str
    type: EdgeType
    strength: float = 1.0

    def __post_init__(self):
        try:
            strength = float(self.strength)
        except (TypeError, ValueError):
            raise ValueError(f"Edge strength must be a number, got {self.strength!r}")
        if not math.isfinite(strength) or strength <= 0:
            raise ValueError(f"Edge strength must be in (0, 1], got {self.strength!r}")
        self.strength = min(strength, 1.0)
        self.type = EdgeType(self.type)

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.source, self.target, self.type.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.source,
            'target': self.target,
            'type': self.type.value,
            'strength': self.strength,
        }


@dataclass
class Graph:
    """Nodes and edges in insertion order."""
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def nodes_of_type(self, node_type: NodeType) -> List[Node]:
        node_type = NodeType(node_type)
        return [node for node in self.nodes if node.type == node_type]

    def dangling_edges(self) -> List[Edge]:
        """Edges whose source or target is not in the node set."""
        ids = self.node_ids()
        return [edge for edge in self.edges
                if edge.source not in ids or edge.target not in ids]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation including summary statistics."""
        from .metrics import graph_statistics

        return {
            'nodes': [node.to_dict() for node in self.nodes],
            'edges': [edge.to_dict() for edge in self.edges],
            'statistics': graph_statistics(self),
        }
