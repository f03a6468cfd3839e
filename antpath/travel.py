from __future__ import annotations
import numbers
from typing import List, Optional, Sequence

import numpy as np

from .errors import ConfigurationError


def check_node(name: str, node, n_nodes: int) -> int:
    if isinstance(node, bool) or not isinstance(node, numbers.Integral):
        raise ConfigurationError(f"{name} must be an integer node index, got {node!r}.")
    if not 0 <= node < n_nodes:
        raise ConfigurationError(f"{name}={node} is out of range for a graph with {n_nodes} nodes.")
    return int(node)


def sample(weights: Sequence[float], rng: np.random.Generator) -> int:
    """Roulette-wheel selection: index i is drawn with probability weights[i] / sum(weights)."""
    w = np.asarray(weights, dtype=float)
    if w.size == 0:
        raise ValueError("Cannot sample from an empty weight vector.")
    if np.any(w < 0):
        raise ValueError("Weights must be non-negative.")
    ecdf = np.cumsum(w)
    total = ecdf[-1]
    if not total > 0:
        raise ValueError("Cannot sample from an all-zero weight vector.")
    # draw in (0, total] so that zero-weight entries are never hit
    p = (1.0 - rng.random()) * total
    i = int(np.searchsorted(ecdf, p, side="left"))
    return min(i, w.size - 1)


def travel(
    P: np.ndarray,
    q: float,
    start_node: int,
    end_node: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[int]:
    """Let one ant walk through the graph guided by the desirability matrix `P`.

    `P[to, from]` is how attractive it is to move from `from` to `to`. At every
    step the ant samples its next node from the column of the current node with
    probability `q` and otherwise takes the most attractive unvisited node.

    If `end_node` is given and differs from `start_node`, it is held back until
    the last position. Passing `end_node == start_node` builds a tour whose
    start node appears once.

    Returns a permutation of range(N) starting at `start_node`.
    """
    P = np.asarray(P, dtype=float)
    if P.ndim != 2 or P.shape[0] != P.shape[1] or P.shape[0] == 0:
        raise ConfigurationError(f"P must be a non-empty square matrix, got shape {P.shape}.")
    if not 0.0 <= q <= 1.0:
        raise ConfigurationError(f"q must be within [0, 1], got {q}.")
    n = P.shape[0]
    start_node = check_node("start_node", start_node, n)
    if end_node is not None:
        end_node = check_node("end_node", end_node, n)
    if rng is None:
        rng = np.random.default_rng()

    not_visited = np.ones(n, dtype=bool)
    not_visited[start_node] = False
    if end_node is not None:
        not_visited[end_node] = False

    path = [start_node]
    current = start_node
    for pos in range(1, n):
        if pos == n - 1 and end_node is not None and end_node != start_node:
            not_visited[end_node] = True

        candidates = np.flatnonzero(not_visited)
        weights = P[candidates, current]
        if rng.random() < q:
            if weights.sum() > 0.0:
                k = sample(weights, rng)
            else:
                # heuristic underflow can zero a whole column
                k = int(rng.integers(candidates.size))
        else:
            k = int(np.argmax(weights))
        nxt = int(candidates[k])

        not_visited[nxt] = False
        path.append(nxt)
        current = nxt
    return path
