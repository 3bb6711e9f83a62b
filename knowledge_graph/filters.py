"""View filters and subgraph selection for knowledge graphs."""

from collections import defaultdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from .builder import BuilderConfig
from .graph_types import Edge, Graph, NodeType
from .records import PaperRecord, extract_array_field, make_node_id


class ViewMode(str, Enum):
    """Focused views: papers plus one entity type."""
    ALL = 'all'
    MATERIAL = 'material'
    ORGANISM = 'organism'
    AUTHOR = 'author'


# Plural names used by the exploration UI
_VIEW_ALIASES = {
    'materials': ViewMode.MATERIAL,
    'organisms': ViewMode.ORGANISM,
    'authors': ViewMode.AUTHOR,
}


def resolve_view_mode(mode: Union[str, ViewMode]) -> ViewMode:
    if isinstance(mode, ViewMode):
        return mode
    key = str(mode).strip().lower()
    if key in _VIEW_ALIASES:
        return _VIEW_ALIASES[key]
    try:
        return ViewMode(key)
    except ValueError:
        valid = [m.value for m in ViewMode] + list(_VIEW_ALIASES)
        raise ValueError(f"Unknown view mode: {mode}. Valid options: {valid}")


def _restrict_edges(edges: Iterable[Edge], kept_ids) -> List[Edge]:
    # Edges losing an endpoint are dropped
    return [edge for edge in edges if edge.source in kept_ids and edge.target in kept_ids]


def filter_view(graph: Graph, mode: Union[str, ViewMode] = ViewMode.ALL) -> Graph:
    """
    Restrict a graph to papers plus one entity type.

    Args:
        graph: Graph produced by the builder
        mode: 'all', 'material', 'organism' or 'author' (plurals accepted)

    Returns:
        The same graph for 'all', otherwise a new filtered Graph
    """
    mode = resolve_view_mode(mode)
    if mode == ViewMode.ALL:
        return graph

    target_type = NodeType(mode.value)
    nodes = [node for node in graph.nodes
             if node.type == NodeType.PAPER or node.type == target_type]
    kept_ids = {node.id for node in nodes}
    return Graph(nodes=nodes, edges=_restrict_edges(graph.edges, kept_ids))


def node_degrees(graph: Graph) -> Dict[str, int]:
    degrees = defaultdict(int)
    for edge in graph.edges:
        degrees[edge.source] += 1
        degrees[edge.target] += 1
    return dict(degrees)


def filter_min_connections(graph: Graph, min_connections: int = 2,
                           include_orphans: bool = False) -> Graph:
    """
    Drop weakly connected entities, keeping every paper.

    Degrees are counted on the unfiltered graph; nothing is removed when
    ``include_orphans`` is set or ``min_connections`` is 1 or less.
    """
    if include_orphans or min_connections <= 1:
        return graph

    degrees = node_degrees(graph)
    nodes = [node for node in graph.nodes
             if node.type == NodeType.PAPER or degrees.get(node.id, 0) >= min_connections]
    kept_ids = {node.id for node in nodes}
    return Graph(nodes=nodes, edges=_restrict_edges(graph.edges, kept_ids))


# Record fields holding each entity type
_ENTITY_FIELDS = {
    NodeType.AUTHOR: ('authors',),
    NodeType.MATERIAL: ('anode_materials', 'cathode_materials'),
    NodeType.ORGANISM: ('organism_types',),
}


def _entity_names(record: PaperRecord, node_type: NodeType, config: BuilderConfig) -> List[str]:
    """Names in ``record`` that the builder turns into nodes of ``node_type``."""
    if node_type == NodeType.CONCEPT:
        return config.select_keywords(extract_array_field(record.keywords))
    if node_type == NodeType.METHOD:
        label = record.system_type_label()
        return [label] if label is not None else []
    return [value for field_name in _ENTITY_FIELDS[node_type]
            for value in extract_array_field(getattr(record, field_name))]


def select_records_for_node(records: Iterable[Any], node_id: str,
                            config: Optional[BuilderConfig] = None) -> List[PaperRecord]:
    """
    Select the records that mention the entity behind ``node_id``.

    Only mentions the builder would turn into nodes count, so keywords past
    ``max_keywords`` or shorter than ``min_keyword_length`` never match.
    The caller builds the neighbourhood subgraph from the returned records.
    """
    config = config if config is not None else BuilderConfig()
    type_name = node_id.split('_', 1)[0]
    try:
        node_type = NodeType(type_name)
    except ValueError:
        raise ValueError(f"Node id has no known type prefix: {node_id}")

    selected = []
    for index, raw_record in enumerate(records):
        record = PaperRecord.coerce(raw_record)
        if node_type == NodeType.PAPER:
            candidates = [value for value in (record.id, record.title) if value is not None]
            if not candidates:
                candidates = [f"untitled {index}"]
            matched = any(make_node_id(node_type, str(value)) == node_id for value in candidates)
        else:
            matched = any(make_node_id(node_type, value) == node_id
                          for value in _entity_names(record, node_type, config))
        if matched:
            selected.append(record)
    return selected
