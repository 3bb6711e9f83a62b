"""Force-directed layout of knowledge graphs."""

from .force_directed import ForceDirectedLayout, compute_layout, layout_graph
from .layout_config import (
    LayoutConfig, DEFAULT_LAYOUT, COMPACT_LAYOUT, SPACIOUS_3D_LAYOUT,
    get_layout_config, config_to_dict, dict_to_config
)
from .neighbors import find_repulsion_pairs

__all__ = [
    'ForceDirectedLayout',
    'compute_layout',
    'layout_graph',
    'LayoutConfig',
    'DEFAULT_LAYOUT',
    'COMPACT_LAYOUT',
    'SPACIOUS_3D_LAYOUT',
    'get_layout_config',
    'config_to_dict',
    'dict_to_config',
    'find_repulsion_pairs',
]
