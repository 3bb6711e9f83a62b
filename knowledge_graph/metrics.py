"""
Statistics and topology metrics for knowledge graphs.

Counts per node/edge type are computed directly; topology metrics go
through a NetworkX view of the graph.
"""

import math
from collections import Counter
from typing import Any, Dict

import networkx as nx
import numpy as np

from .graph_types import Graph, Node


def graph_statistics(graph: Graph) -> Dict[str, Any]:
    """Node and edge counts, overall and per type."""
    nodes_by_type = Counter(node.type.value for node in graph.nodes)
    edges_by_type = Counter(edge.type.value for edge in graph.edges)
    return {
        'total_nodes': len(graph.nodes),
        'nodes_by_type': dict(nodes_by_type),
        'total_edges': len(graph.edges),
        'edges_by_type': dict(edges_by_type),
    }


def to_networkx(graph: Graph) -> nx.Graph:
    """
    Convert to an undirected NetworkX graph.

    Parallel edges of different types between the same pair collapse into
    one NetworkX edge carrying the strongest strength.
    """
    G = nx.Graph()
    for node in graph.nodes:
        attrs = {
            'name': node.name,
            'type': node.type.value,
            'weight': node.weight,
        }
        if node.position is not None:
            attrs['position'] = tuple(node.position)
        G.add_node(node.id, **attrs)

    for edge in graph.edges:
        if G.has_edge(edge.source, edge.target):
            data = G.edges[edge.source, edge.target]
            data['strength'] = max(data['strength'], edge.strength)
            data['types'].append(edge.type.value)
        else:
            G.add_edge(edge.source, edge.target,
                       strength=edge.strength, types=[edge.type.value])
    return G


def compute_graph_metrics(graph: Graph) -> Dict[str, Any]:
    """Compute connectivity, degree and clustering metrics."""
    G = to_networkx(graph)
    if G.number_of_nodes() == 0:
        return {}

    metrics = {}

    # Basic metrics
    metrics['num_nodes'] = G.number_of_nodes()
    metrics['num_edges'] = G.number_of_edges()
    metrics['density'] = nx.density(G)

    # Connectivity metrics
    metrics['is_connected'] = nx.is_connected(G)
    components = list(nx.connected_components(G))
    metrics['num_components'] = len(components)
    metrics['largest_component_size'] = len(max(components, key=len))
    metrics['isolated_nodes'] = nx.number_of_isolates(G)

    # Degree metrics
    degrees = [degree for _, degree in G.degree()]
    metrics['average_degree'] = float(np.mean(degrees))
    metrics['degree_std'] = float(np.std(degrees))
    metrics['max_degree'] = max(degrees)
    metrics['min_degree'] = min(degrees)

    # Clustering metrics
    if G.number_of_nodes() > 2:
        metrics['clustering_coefficient'] = nx.average_clustering(G)
        metrics['transitivity'] = nx.transitivity(G)

    return metrics


def node_size(node: Node) -> float:
    """Render size: type base size grown by the square root of the weight."""
    return node.type.base_size + math.sqrt(max(node.weight, 0.0)) * 2
