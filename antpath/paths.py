from __future__ import annotations
from typing import Iterator, Sequence, Tuple

import numpy as np


def edges(path: Sequence[int], is_tour: bool) -> Iterator[Tuple[int, int]]:
    """Yield the (from, to) pairs of `path`.

    A tour of N nodes has N edges, the last one closing back to path[0].
    An open path has N - 1 edges.
    """
    n = len(path)
    n_edges = n if is_tour else n - 1
    for k in range(n_edges):
        yield path[k], path[(k + 1) % n]


def edge_distances(dist_matrix: np.ndarray, path: Sequence[int], is_tour: bool) -> Iterator[float]:
    # dist_matrix is indexed [to, from]
    for i, j in edges(path, is_tour):
        yield dist_matrix[j, i]


def path_cost(dist_matrix: np.ndarray, path: Sequence[int], is_tour: bool) -> float:
    return float(sum(edge_distances(dist_matrix, path, is_tour)))
