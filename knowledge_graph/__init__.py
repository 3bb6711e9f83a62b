"""Knowledge graph construction from bibliographic paper records."""

from .builder import BuilderConfig, BuildReport, KnowledgeGraphBuilder, build_graph
from .errors import (
    KnowledgeGraphError, MalformedField, DanglingEdge,
    InvalidGraphInput, InvalidConfig, LayoutCancelled
)
from .filters import ViewMode, filter_view, filter_min_connections, select_records_for_node
from .graph_types import Edge, EdgeType, Graph, Node, NodeType
from .metrics import compute_graph_metrics, graph_statistics, node_size, to_networkx
from .records import PaperRecord, extract_array_field, make_node_id, normalize_name, parse_field

__all__ = [
    'BuilderConfig',
    'BuildReport',
    'KnowledgeGraphBuilder',
    'build_graph',
    'KnowledgeGraphError',
    'MalformedField',
    'DanglingEdge',
    'InvalidGraphInput',
    'InvalidConfig',
    'LayoutCancelled',
    'ViewMode',
    'filter_view',
    'filter_min_connections',
    'select_records_for_node',
    'Edge',
    'EdgeType',
    'Graph',
    'Node',
    'NodeType',
    'compute_graph_metrics',
    'graph_statistics',
    'node_size',
    'to_networkx',
    'PaperRecord',
    'extract_array_field',
    'make_node_id',
    'normalize_name',
    'parse_field',
]
