"""
Unit tests for the force-directed layout engine.

Checks determinism, boundedness, energy decay, input validation and the
equivalence of the two repulsion neighbour searches.
"""

import unittest

import numpy as np

from knowledge_graph.builder import build_graph
from knowledge_graph.errors import InvalidConfig, InvalidGraphInput, LayoutCancelled
from knowledge_graph.graph_types import Edge, EdgeType, Node, NodeType
from knowledge_graph.test_builder import sample_records
from layout.force_directed import ForceDirectedLayout, compute_layout, layout_graph
from layout.layout_config import (
    DEFAULT_LAYOUT, LayoutConfig, get_layout_config, dict_to_config, config_to_dict
)
from layout.neighbors import all_pairs_within, kdtree_pairs_within


def make_node(node_id, importance=None):
    return Node(id=node_id, name=node_id, type=NodeType.CONCEPT, weight=1.0,
                importance=importance)


def chain_graph(n_nodes):
    nodes = [make_node(f"n{i}") for i in range(n_nodes)]
    edges = [Edge(f"n{i}", f"n{i + 1}", EdgeType.RELATED_TO, 1.0) for i in range(n_nodes - 1)]
    return nodes, edges


def positions_of(nodes):
    return np.array([node.position for node in nodes])


class TestLayoutConfig(unittest.TestCase):
    """Test cases for configuration validation."""

    def test_defaults(self):
        config = LayoutConfig()
        self.assertEqual(config.iterations, 50)
        self.assertEqual(config.repulsion_radius, 200)
        self.assertEqual(config.dimensions, 2)
        config.validate()

    def test_invalid_values(self):
        bad_values = [
            {'iterations': 0},
            {'iterations': 2.5},
            {'width': -10},
            {'repulsion_coefficient': 0},
            {'attraction_coefficient': -0.01},
            {'damping': 1.5},
            {'step_scale': 0},
            {'base_radius': 0},
            {'base_radius': -5},
            {'depth': 0},
            {'margin': 700},
            {'neighbor_search': 'quadtree'},
        ]
        for kwargs in bad_values:
            with self.assertRaises(InvalidConfig, msg=str(kwargs)):
                ForceDirectedLayout(LayoutConfig(**kwargs))

    def test_presets(self):
        self.assertEqual(get_layout_config('spacious_3d').dimensions, 3)
        config = get_layout_config('default')
        config.iterations = 3
        self.assertEqual(get_layout_config('default').iterations, 50)
        self.assertEqual(DEFAULT_LAYOUT.iterations, 50)
        with self.assertRaises(ValueError):
            get_layout_config('tiny')

    def test_dict_round_trip_with_camel_case(self):
        config = dict_to_config({'width': 500, 'height': 400, 'repulsionRadius': 80,
                                 'stepScale': 0.2})
        self.assertEqual(config.repulsion_radius, 80)
        self.assertEqual(config.step_scale, 0.2)
        self.assertEqual(config_to_dict(config)['width'], 500)
        with self.assertRaises(InvalidConfig):
            dict_to_config({'gravity': 1.0})


class TestForceDirectedLayout(unittest.TestCase):
    """Test cases for ForceDirectedLayout."""

    def setUp(self):
        self.graph = build_graph(sample_records())
        self.config = LayoutConfig()

    def test_all_nodes_positioned(self):
        positioned = compute_layout(self.graph.nodes, self.graph.edges, self.config)
        self.assertEqual([n.id for n in positioned], [n.id for n in self.graph.nodes])
        self.assertTrue(all(len(n.position) == 2 for n in positioned))

    def test_input_not_mutated(self):
        compute_layout(self.graph.nodes, self.graph.edges, self.config)
        self.assertTrue(all(node.position is None for node in self.graph.nodes))

    def test_determinism(self):
        first = compute_layout(self.graph.nodes, self.graph.edges, self.config)
        second = compute_layout(self.graph.nodes, self.graph.edges, self.config)
        self.assertEqual([n.position for n in first], [n.position for n in second])

    def test_boundedness(self):
        config = LayoutConfig(width=400, height=300, margin=25, repulsion_coefficient=5000,
                              iterations=30)
        positioned = compute_layout(self.graph.nodes, self.graph.edges, config)
        positions = positions_of(positioned)
        self.assertTrue(np.all(positions[:, 0] >= 25) and np.all(positions[:, 0] <= 375))
        self.assertTrue(np.all(positions[:, 1] >= 25) and np.all(positions[:, 1] <= 275))

    def test_three_dimensional_layout(self):
        config = LayoutConfig(width=800, height=600, depth=400)
        positioned = compute_layout(self.graph.nodes, self.graph.edges, config)
        positions = positions_of(positioned)
        self.assertEqual(positions.shape, (len(self.graph.nodes), 3))
        self.assertTrue(np.all(positions[:, 2] >= 50) and np.all(positions[:, 2] <= 350))
        # Nodes are not flattened onto a single depth plane
        self.assertGreater(np.ptp(positions[:, 2]), 0)

    def test_initial_positions_distinct(self):
        layout = ForceDirectedLayout(self.config)
        initial = layout.initial_positions(self.graph.nodes)
        self.assertEqual(len(np.unique(initial, axis=0)), len(self.graph.nodes))

    def test_importance_grows_initial_radius(self):
        layout = ForceDirectedLayout(self.config)
        nodes = [make_node('a', importance=2.0), make_node('b'), make_node('c', float('nan'))]
        initial = layout.initial_positions(nodes)
        center = np.array([600.0, 400.0])
        radii = np.linalg.norm(initial - center, axis=1)
        np.testing.assert_allclose(radii, [500.0, 300.0, 300.0])

    def test_two_connected_nodes_converge(self):
        nodes, edges = chain_graph(2)
        config = LayoutConfig(attraction_coefficient=0.1, repulsion_coefficient=1.0)
        layout = ForceDirectedLayout(config)
        initial = layout.initial_positions(nodes)
        initial_distance = np.linalg.norm(initial[0] - initial[1])

        positioned = layout.compute_layout(nodes, edges)
        final = positions_of(positioned)
        self.assertLess(np.linalg.norm(final[0] - final[1]), initial_distance)

    def test_energy_decays(self):
        nodes, edges = chain_graph(8)
        layout = ForceDirectedLayout(LayoutConfig(iterations=200))
        layout.compute_layout(nodes, edges)
        energy = np.array(layout.energy_history)
        self.assertEqual(len(energy), 200)
        self.assertLess(energy[-1], 0.5 * energy.max())
        # Non-increasing once the initial transient has passed
        self.assertTrue(np.all(np.diff(energy[20:]) <= 1e-9 * energy.max()))

    def test_energy_non_increasing_on_built_graph(self):
        layout = ForceDirectedLayout(self.config)
        layout.compute_layout(self.graph.nodes, self.graph.edges)
        energy = np.array(layout.energy_history)
        self.assertTrue(np.all(np.diff(energy[20:]) <= 1e-9 * energy.max()))

    def test_saturated_canvas_has_no_stacked_nodes(self):
        # Large importance pushes most initial positions past the canvas edge
        nodes = [make_node(f"n{i}", importance=6) for i in range(40)]
        positioned = compute_layout(nodes, [], self.config)
        positions = positions_of(positioned)
        self.assertEqual(len(np.unique(positions, axis=0)), len(nodes))

    def test_coincident_nodes_separate(self):
        layout = ForceDirectedLayout(self.config)
        positions = np.array([[50.0, 50.0], [50.0, 50.0], [50.0, 50.0], [600.0, 400.0]])
        forces = layout._repulsion_forces(positions)
        self.assertTrue(np.all(np.isfinite(forces)))
        self.assertEqual(len(np.unique(forces[:3], axis=0)), 3)
        np.testing.assert_allclose(forces[:3].sum(axis=0), 0.0, atol=1e-9)

    def test_neighbor_search_methods_agree(self):
        records = sample_records() * 3
        for i, record in enumerate(records):
            record = dict(record)
            record['id'] = i
            records[i] = record
        graph = build_graph(records)
        results = []
        for method in ('all_pairs', 'kdtree'):
            config = LayoutConfig(neighbor_search=method, iterations=20)
            results.append([n.position for n in
                            compute_layout(graph.nodes, graph.edges, config)])
        self.assertEqual(results[0], results[1])

    def test_layout_graph(self):
        positioned = layout_graph(self.graph, self.config)
        self.assertEqual(len(positioned.edges), len(self.graph.edges))
        self.assertTrue(all(node.position is not None for node in positioned.nodes))

    def test_empty_graph(self):
        self.assertEqual(compute_layout([], [], self.config), [])


class TestLayoutErrors(unittest.TestCase):
    """Structural contract violations fail before the simulation."""

    def test_missing_endpoint(self):
        nodes, edges = chain_graph(3)
        edges.append(Edge('n0', 'ghost', EdgeType.CITES, 0.5))
        with self.assertRaises(InvalidGraphInput):
            compute_layout(nodes, edges)

    def test_duplicate_node_ids(self):
        nodes = [make_node('a'), make_node('a')]
        with self.assertRaises(InvalidGraphInput):
            compute_layout(nodes, [])

    def test_cancellation_between_iterations(self):
        nodes, edges = chain_graph(4)
        calls = []

        def should_stop():
            calls.append(1)
            return len(calls) > 3

        layout = ForceDirectedLayout(LayoutConfig(), should_stop=should_stop)
        with self.assertRaises(LayoutCancelled):
            layout.compute_layout(nodes, edges)
        self.assertEqual(len(layout.energy_history), 3)


class TestNeighborSearch(unittest.TestCase):
    """Test cases for repulsion pair search."""

    def test_pairs_match(self):
        rng = np.random.RandomState(42)
        positions = rng.uniform(0, 500, size=(120, 2))
        positions[5] = positions[6]
        expected = all_pairs_within(positions, 60.0)
        actual = kdtree_pairs_within(positions, 60.0)
        np.testing.assert_array_equal(expected, actual)
        # Coincident points still repel
        self.assertTrue(any((pair == [5, 6]).all() for pair in expected))
        self.assertTrue(np.all(expected[:, 0] < expected[:, 1]))

    def test_cutoff_is_strict(self):
        positions = np.array([[0.0, 0.0], [10.0, 0.0], [25.0, 0.0]])
        pairs = all_pairs_within(positions, 10.0)
        self.assertEqual(len(pairs), 0)
        np.testing.assert_array_equal(kdtree_pairs_within(positions, 10.0001), [[0, 1]])


if __name__ == '__main__':
    unittest.main(verbosity=2)
