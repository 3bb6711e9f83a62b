"""
Force-directed layout for knowledge graphs.

A discrete-time force simulation: nodes start on a circle around the
canvas centre, repel neighbours within a cutoff radius, are pulled
together along edges, and are clamped to the canvas after every step.
Positions and velocities live in private arrays indexed like the input
node list, so the caller's nodes are never mutated.
"""

from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from knowledge_graph.errors import InvalidGraphInput, LayoutCancelled
from knowledge_graph.graph_types import Edge, Graph, Node

from .layout_config import LayoutConfig
from .neighbors import find_repulsion_pairs


# Repulsion magnitude is capped at coefficient / MIN_REPULSION_DISTANCE
MIN_REPULSION_DISTANCE = 1.0


class ForceDirectedLayout:
    """
    Deterministic force-directed layout.

    Identical nodes, edges and config always give bit-for-bit identical
    positions: initial placement is index based, and forces are
    accumulated over index-sorted pairs and edges.
    """

    def __init__(self, config: Optional[LayoutConfig] = None,
                 should_stop: Optional[Callable[[], bool]] = None,
                 verbose: bool = False):
        self.config = config if config is not None else LayoutConfig()
        self.config.validate()
        self.should_stop = should_stop
        self.verbose = verbose
        self.energy_history: List[float] = []

    def compute_layout(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> List[Node]:
        """
        Compute node positions.

        Args:
            nodes: Nodes to place; order determines the initial placement
            edges: Edges between the nodes; every endpoint must exist

        Returns:
            New Node objects with ``position`` populated, in input order
        """
        index = self._index_nodes(nodes)
        sources, targets, strengths = self._edge_arrays(edges, index)
        self.energy_history = []

        if not nodes:
            return []

        config = self.config
        positions = self.initial_positions(nodes)
        velocities = np.zeros_like(positions)
        lower = np.full(config.dimensions, float(config.margin))
        upper = np.array(config.extent, dtype=float) - config.margin

        if self.verbose:
            print(f"Laying out {len(nodes)} nodes and {len(edges)} edges "
                  f"({config.dimensions}D, {config.iterations} iterations)")

        for iteration in range(config.iterations):
            if self.should_stop is not None and self.should_stop():
                raise LayoutCancelled(f"Layout cancelled before iteration {iteration}")

            forces = self._repulsion_forces(positions)
            forces += self._attraction_forces(positions, sources, targets, strengths)

            velocities += forces
            self.energy_history.append(float(np.sum(velocities * velocities)))

            positions += velocities * config.step_scale
            np.clip(positions, lower, upper, out=positions)
            velocities *= config.damping

            if self.verbose and (iteration + 1) % 10 == 0:
                print(f"  Iteration {iteration + 1}: kinetic energy {self.energy_history[-1]:.3f}")

        return [node.with_position(positions[i]) for i, node in enumerate(nodes)]

    def initial_positions(self, nodes: Sequence[Node]) -> np.ndarray:
        """Place node i at angle 2*pi*i/n on a circle grown by its importance."""
        config = self.config
        n_nodes = len(nodes)
        positions = np.zeros((n_nodes, config.dimensions))
        if n_nodes == 0:
            return positions

        center = np.array(config.extent, dtype=float) / 2
        indices = np.arange(n_nodes)
        angles = 2 * np.pi * indices / n_nodes
        bonus = np.array([node.importance_bonus() for node in nodes])
        radii = config.base_radius + bonus * config.importance_scale

        positions[:, 0] = center[0] + radii * np.cos(angles)
        positions[:, 1] = center[1] + radii * np.sin(angles)
        if config.dimensions == 3:
            # Spread over the depth from front to back by index
            depth_radius = config.depth / 2 - config.margin
            positions[:, 2] = center[2] + depth_radius * np.cos(np.pi * (indices + 0.5) / n_nodes)

        return positions

    def _index_nodes(self, nodes: Sequence[Node]) -> dict:
        index = {}
        for i, node in enumerate(nodes):
            if node.id in index:
                raise InvalidGraphInput(f"Duplicate node id: {node.id}")
            index[node.id] = i
        return index

    def _edge_arrays(self, edges: Sequence[Edge],
                     index: dict) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        sources, targets, strengths = [], [], []
        for edge in edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in index:
                    raise InvalidGraphInput(
                        f"Edge {edge.source} -> {edge.target} ({edge.type.value}) "
                        f"references missing node: {endpoint}")
            sources.append(index[edge.source])
            targets.append(index[edge.target])
            strengths.append(edge.strength)
        return (np.array(sources, dtype=np.intp),
                np.array(targets, dtype=np.intp),
                np.array(strengths, dtype=float))

    def _repulsion_forces(self, positions: np.ndarray) -> np.ndarray:
        """Push pairs within the cutoff apart with magnitude coefficient / max(distance, 1)."""
        config = self.config
        forces = np.zeros_like(positions)
        pairs = find_repulsion_pairs(positions, config.repulsion_radius,
                                     method=config.neighbor_search,
                                     kdtree_threshold=config.kdtree_threshold)
        if len(pairs) == 0:
            return forces

        first, second = pairs[:, 0], pairs[:, 1]
        diff = positions[second] - positions[first]
        distances = np.sqrt(np.sum(diff * diff, axis=1))

        coincident = distances == 0
        directions = diff / np.where(coincident, 1.0, distances)[:, None]
        if np.any(coincident):
            # Stacked nodes (usually clamped into a corner) split along an index-based angle
            angles = 2 * np.pi * second[coincident] / len(positions)
            directions[coincident] = 0.0
            directions[coincident, 0] = np.cos(angles)
            directions[coincident, 1] = np.sin(angles)

        magnitude = config.repulsion_coefficient / np.maximum(distances, MIN_REPULSION_DISTANCE)
        push = directions * magnitude[:, None]

        np.add.at(forces, first, -push)
        np.add.at(forces, second, push)
        return forces

    def _attraction_forces(self, positions: np.ndarray, sources: np.ndarray,
                           targets: np.ndarray, strengths: np.ndarray) -> np.ndarray:
        """Pull edge endpoints together with magnitude distance * coefficient * strength."""
        forces = np.zeros_like(positions)
        if len(sources) == 0:
            return forces

        diff = positions[targets] - positions[sources]
        distances = np.sqrt(np.sum(diff * diff, axis=1))
        active = distances > 0
        if not np.any(active):
            return forces

        diff = diff[active]
        distances = distances[active]
        magnitude = distances * self.config.attraction_coefficient * strengths[active]
        pull = diff / distances[:, None] * magnitude[:, None]

        np.add.at(forces, sources[active], pull)
        np.add.at(forces, targets[active], -pull)
        return forces


def compute_layout(nodes: Sequence[Node], edges: Sequence[Edge],
                   config: Optional[LayoutConfig] = None,
                   should_stop: Optional[Callable[[], bool]] = None,
                   verbose: bool = False) -> List[Node]:
    """
    Lay out nodes with the force-directed simulation.

    Args:
        nodes: Nodes to place
        edges: Edges between them
        config: Layout configuration (defaults used when None)
        should_stop: Optional callable checked between iterations
        verbose: Print progress

    Returns:
        Positioned copies of ``nodes``
    """
    layout = ForceDirectedLayout(config=config, should_stop=should_stop, verbose=verbose)
    return layout.compute_layout(nodes, edges)


def layout_graph(graph: Graph, config: Optional[LayoutConfig] = None,
                 verbose: bool = False) -> Graph:
    """Return a new Graph whose nodes carry layout positions."""
    positioned = compute_layout(graph.nodes, graph.edges, config=config, verbose=verbose)
    return Graph(nodes=positioned, edges=list(graph.edges))
