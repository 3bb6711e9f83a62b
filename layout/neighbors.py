"""
Neighbour search for the repulsion step.

Both strategies return the same pairs: an ``(m, 2)`` integer array of
index pairs ``i < j`` with ``distance < radius``, sorted lexicographically
so force accumulation order never depends on the search structure.
Coincident points are included; the repulsion step separates them.
"""

import numpy as np
from scipy.spatial import cKDTree


def _finalize_pairs(positions: np.ndarray, pairs: np.ndarray, radius: float) -> np.ndarray:
    if len(pairs) == 0:
        return np.empty((0, 2), dtype=np.intp)
    pairs = np.asarray(pairs, dtype=np.intp)
    pairs = np.sort(pairs, axis=1)
    diff = positions[pairs[:, 1]] - positions[pairs[:, 0]]
    distances = np.sqrt(np.sum(diff * diff, axis=1))
    pairs = pairs[distances < radius]
    order = np.lexsort((pairs[:, 1], pairs[:, 0]))
    return pairs[order]


def all_pairs_within(positions: np.ndarray, radius: float) -> np.ndarray:
    """Check every unordered pair; O(n^2) memory and time."""
    n_nodes = len(positions)
    if n_nodes < 2:
        return np.empty((0, 2), dtype=np.intp)
    rows, cols = np.triu_indices(n_nodes, k=1)
    return _finalize_pairs(positions, np.column_stack([rows, cols]), radius)


def kdtree_pairs_within(positions: np.ndarray, radius: float) -> np.ndarray:
    """Restrict checks to nearby points with a KD-tree."""
    if len(positions) < 2:
        return np.empty((0, 2), dtype=np.intp)
    tree = cKDTree(positions)
    # Slightly widened query; the strict cutoff is applied in _finalize_pairs
    pairs = tree.query_pairs(r=radius * (1 + 1e-9), output_type='ndarray')
    return _finalize_pairs(positions, pairs, radius)


def find_repulsion_pairs(positions: np.ndarray, radius: float,
                         method: str = 'auto', kdtree_threshold: int = 256) -> np.ndarray:
    """
    Find node pairs close enough to repel each other.

    Args:
        positions: Array of shape (n_nodes, dim)
        radius: Repulsion cutoff; pairs at or beyond it are ignored
        method: 'all_pairs', 'kdtree' or 'auto'
        kdtree_threshold: Node count above which 'auto' uses the KD-tree

    Returns:
        Sorted int array of shape (n_pairs, 2)
    """
    if method == 'auto':
        method = 'kdtree' if len(positions) > kdtree_threshold else 'all_pairs'

    if method == 'all_pairs':
        return all_pairs_within(positions, radius)
    elif method == 'kdtree':
        return kdtree_pairs_within(positions, radius)
    else:
        raise ValueError(f"Unknown neighbor search method: {method}")
