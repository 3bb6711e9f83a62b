"""
Force-directed layout configurations.

Defaults reproduce the interactive graph explorer: a 1200x800 canvas,
50 iterations, repulsion within 200 units.
"""

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from knowledge_graph.errors import InvalidConfig


NEIGHBOR_SEARCH_METHODS = ('auto', 'all_pairs', 'kdtree')


@dataclass
class LayoutConfig:
    """Canvas bounds and force simulation parameters."""
    name: str = "default"
    width: float = 1200.0
    height: float = 800.0
    depth: Optional[float] = None  # set for 3D layouts
    iterations: int = 50
    repulsion_radius: float = 200.0
    repulsion_coefficient: float = 50.0
    attraction_coefficient: float = 0.01
    damping: float = 0.8
    step_scale: float = 0.1
    margin: float = 50.0
    base_radius: float = 300.0
    importance_scale: float = 100.0
    neighbor_search: str = "auto"
    kdtree_threshold: int = 256  # "auto" switches to the KD-tree above this node count

    @property
    def dimensions(self) -> int:
        return 3 if self.depth is not None else 2

    @property
    def extent(self):
        if self.depth is not None:
            return (self.width, self.height, self.depth)
        return (self.width, self.height)

    def validate(self):
        """Raise InvalidConfig for values the simulation cannot run with."""
        if not isinstance(self.iterations, int) or isinstance(self.iterations, bool) \
                or self.iterations <= 0:
            raise InvalidConfig(f"iterations must be a positive integer, got {self.iterations!r}")

        positive = {
            'width': self.width,
            'height': self.height,
            'repulsion_radius': self.repulsion_radius,
            'repulsion_coefficient': self.repulsion_coefficient,
            'attraction_coefficient': self.attraction_coefficient,
            'step_scale': self.step_scale,
            'base_radius': self.base_radius,
        }
        if self.depth is not None:
            positive['depth'] = self.depth
        for key, value in positive.items():
            if not _is_number(value) or not value > 0:
                raise InvalidConfig(f"{key} must be a positive number, got {value!r}")

        if not _is_number(self.damping) or not 0 < self.damping <= 1:
            raise InvalidConfig(f"damping must be in (0, 1], got {self.damping!r}")
        for key in ('margin', 'importance_scale'):
            value = getattr(self, key)
            if not _is_number(value) or value < 0:
                raise InvalidConfig(f"{key} must be a non-negative number, got {value!r}")
        for extent in self.extent:
            if extent <= 2 * self.margin:
                raise InvalidConfig(
                    f"margin {self.margin} leaves no usable area in a canvas of size {self.extent}")

        if self.neighbor_search not in NEIGHBOR_SEARCH_METHODS:
            raise InvalidConfig(f"Unknown neighbor search: {self.neighbor_search}. "
                                f"Valid options: {list(NEIGHBOR_SEARCH_METHODS)}")
        if self.kdtree_threshold < 0:
            raise InvalidConfig(f"kdtree_threshold must be >= 0, got {self.kdtree_threshold}")
        return self


def _is_number(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


# Pre-defined layouts

DEFAULT_LAYOUT = LayoutConfig()

COMPACT_LAYOUT = LayoutConfig(
    name="compact",
    width=600.0,
    height=400.0,
    iterations=100,
    repulsion_radius=100.0,
    repulsion_coefficient=25.0,
    margin=20.0,
    base_radius=120.0,
    importance_scale=40.0,
)

SPACIOUS_3D_LAYOUT = LayoutConfig(
    name="spacious_3d",
    width=1600.0,
    height=1200.0,
    depth=800.0,
    iterations=80,
    repulsion_radius=250.0,
    repulsion_coefficient=60.0,
    base_radius=400.0,
)

LAYOUT_PRESETS = {
    "default": DEFAULT_LAYOUT,
    "compact": COMPACT_LAYOUT,
    "spacious_3d": SPACIOUS_3D_LAYOUT,
}


def get_layout_config(name: str = "default") -> LayoutConfig:
    """
    Get a named layout configuration.

    Args:
        name: Preset name ("default", "compact", "spacious_3d")

    Returns:
        A fresh LayoutConfig; changing it leaves the preset untouched
    """
    if name in LAYOUT_PRESETS:
        return replace(LAYOUT_PRESETS[name])

    raise ValueError(f"Unknown layout preset: {name}")


# camelCase option names used by rendering clients
_CAMEL_CASE_KEYS = {
    'repulsionRadius': 'repulsion_radius',
    'repulsionCoefficient': 'repulsion_coefficient',
    'attractionCoefficient': 'attraction_coefficient',
    'stepScale': 'step_scale',
    'baseRadius': 'base_radius',
    'importanceScale': 'importance_scale',
    'neighborSearch': 'neighbor_search',
    'kdtreeThreshold': 'kdtree_threshold',
}


def config_to_dict(config: LayoutConfig) -> Dict[str, Any]:
    """Convert a config dataclass to dictionary."""
    return {k: v for k, v in config.__dict__.items()}


def dict_to_config(d: Dict[str, Any]) -> LayoutConfig:
    """Convert a dictionary (snake_case or camelCase keys) to a LayoutConfig."""
    known = {f.name for f in fields(LayoutConfig)}
    kwargs = {}
    for key, value in d.items():
        name = _CAMEL_CASE_KEYS.get(key, key)
        if name not in known:
            raise InvalidConfig(f"Unknown layout option: {key}")
        kwargs[name] = value
    return LayoutConfig(**kwargs)
