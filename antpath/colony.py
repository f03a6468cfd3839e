from __future__ import annotations
import logging
import math
import numbers
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .errors import ConfigurationError, DegenerateInputError
from .paths import edges, path_cost
from .travel import check_node, travel

logger = logging.getLogger(__name__)


def _is_int(x) -> bool:
    return isinstance(x, numbers.Integral) and not isinstance(x, bool)


@dataclass
class ColonyConfig:
    start_node: Optional[int] = None   # both start and end node, or neither
    end_node: Optional[int] = None
    is_tour: bool = False              # close the path back to the start node
    beta: float = 2.0                  # heuristic (distance) influence
    rho: float = 0.1                   # evaporation rate
    q: float = 0.1                     # probability of a roulette decision instead of a greedy one
    Q: float = 1.0                     # pheromone deposit factor
    tau_min: float = 1.0
    tau_max: float = 10.0              # also the initial pheromone level
    max_iter: int = 20
    reset_iter: int = 10               # iterations without improvement before pheromones are reset
    top_perc_ants: float = 0.05        # share of ants that deposit pheromones
    n_ants: Optional[int] = None       # None: one ant per node
    n_jobs: int = 1
    seed: Optional[int] = None
    verbose: bool = False

    def __post_init__(self):
        if (self.start_node is None) != (self.end_node is None):
            raise ConfigurationError("Specify both start_node and end_node, or neither.")
        if self.start_node is not None and self.is_tour and self.start_node != self.end_node:
            raise ConfigurationError("A tour must start and end at the same node.")
        if not self.beta >= 0:
            raise ConfigurationError(f"beta must be >= 0, got {self.beta}.")
        if not 0.0 <= self.rho <= 1.0:
            raise ConfigurationError(f"rho must be within [0, 1], got {self.rho}.")
        if not 0.0 <= self.q <= 1.0:
            raise ConfigurationError(f"q must be within [0, 1], got {self.q}.")
        if not self.Q > 0:
            raise ConfigurationError(f"Q must be > 0, got {self.Q}.")
        if not self.tau_min > 0:
            raise ConfigurationError(f"tau_min must be > 0, got {self.tau_min}.")
        if not self.tau_min <= self.tau_max:
            raise ConfigurationError("tau_min must be <= tau_max.")
        if not math.isfinite(self.tau_max):
            raise ConfigurationError("tau_max must be finite.")
        if not _is_int(self.max_iter) or self.max_iter < 1:
            raise ConfigurationError(f"max_iter must be an integer >= 1, got {self.max_iter!r}.")
        if not _is_int(self.reset_iter) or self.reset_iter < 0:
            raise ConfigurationError(f"reset_iter must be an integer >= 0, got {self.reset_iter!r}.")
        if not 0.0 < self.top_perc_ants <= 1.0:
            raise ConfigurationError(f"top_perc_ants must be within (0, 1], got {self.top_perc_ants}.")
        if self.n_ants is not None and (not _is_int(self.n_ants) or self.n_ants < 1):
            raise ConfigurationError(f"n_ants must be None or an integer >= 1, got {self.n_ants!r}.")
        if not _is_int(self.n_jobs) or self.n_jobs < 1:
            raise ConfigurationError(f"n_jobs must be an integer >= 1, got {self.n_jobs!r}.")

    def validate_nodes(self, n_nodes: int):
        """Check the start/end nodes against a graph of `n_nodes` nodes."""
        if self.start_node is None:
            return
        check_node("start_node", self.start_node, n_nodes)
        check_node("end_node", self.end_node, n_nodes)
        if not self.is_tour and n_nodes > 1 and self.start_node == self.end_node:
            raise ConfigurationError("An open path needs distinct start and end nodes; use is_tour=True for a tour.")


@dataclass
class ColonyState:
    """Best-so-far bookkeeping carried from one iteration to the next."""
    best_path: Optional[List[int]] = None
    best_cost: float = math.inf
    no_improv: int = 0
    iteration: int = 0
    n_resets: int = 0


@dataclass
class ColonyResult:
    best_path: List[int]
    best_cost: float
    history_best_costs: List[float]
    history_best_paths: List[List[int]]
    n_resets: int
    config: ColonyConfig
    elapsed_sec: float


def validate_distance_matrix(dist_matrix) -> np.ndarray:
    try:
        D = np.array(dist_matrix, dtype=float)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Distance matrix must be numeric: {e}") from e
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise ConfigurationError(f"Distance matrix must be square, got shape {D.shape}.")
    if D.shape[0] < 2:
        raise ConfigurationError("Distance matrix needs at least two nodes.")
    off_diag = ~np.eye(D.shape[0], dtype=bool)
    if not np.all(np.isfinite(D[off_diag])):
        raise DegenerateInputError("Distance matrix contains non-finite distances between distinct nodes.")
    if not np.all(D[off_diag] > 0):
        raise DegenerateInputError("Distance matrix contains zero or negative distances between distinct nodes.")
    D.setflags(write=False)
    return D


def heuristic_matrix(dist_matrix: np.ndarray, beta: float) -> np.ndarray:
    """eta[to, from]: how many times shorter an edge is than the median edge into `to`."""
    D = np.array(dist_matrix, dtype=float)
    np.fill_diagonal(D, np.nan)
    median_in = np.nanmedian(D, axis=1, keepdims=True)
    eta = (median_in / D) ** beta
    np.fill_diagonal(eta, 0.0)
    return eta


class AntColonyOptimizer:
    """Ant colony optimizer for shortest Hamiltonian paths and tours on directed graphs.

    Combines Max-Min Ant System (pheromones bounded by tau_min/tau_max), Elitist
    Ant System (only the top ants deposit) and Ant Colony System (greedy choice
    with probability 1 - q). Pheromones are reset to tau_max after
    `reset_iter` iterations without improvement.
    """
    def __init__(self, dist_matrix, cfg: Optional[ColonyConfig] = None, record_pheromones: bool = False):
        self.cfg = cfg or ColonyConfig()
        self.D = validate_distance_matrix(dist_matrix)
        self.n = self.D.shape[0]
        self.cfg.validate_nodes(self.n)

        self.n_ants = self.cfg.n_ants or self.n
        self.top_k = min(self.n_ants, max(1, int(self.cfg.top_perc_ants * self.n_ants)))
        self.rng = np.random.default_rng(self.cfg.seed)

        self.eta = heuristic_matrix(self.D, self.cfg.beta)
        self.tau = np.full((self.n, self.n), self.cfg.tau_max)
        self.state = ColonyState()

        self.record_pheromones = record_pheromones
        self.history_best_costs: List[float] = []
        self.history_best_paths: List[List[int]] = []
        self.history_pheromones: List[np.ndarray] = []

    def _endpoints(self, rng: np.random.Generator) -> Tuple[int, Optional[int]]:
        if self.cfg.start_node is not None:
            return self.cfg.start_node, self.cfg.end_node
        start = int(rng.integers(self.n))
        return start, (start if self.cfg.is_tour else None)

    def _ant(self, P: np.ndarray, rng: np.random.Generator) -> Tuple[float, List[int]]:
        start, end = self._endpoints(rng)
        path = travel(P, self.cfg.q, start, end, rng=rng)
        return path_cost(self.D, path, self.cfg.is_tour), path

    def _construct_solutions(self, P: np.ndarray) -> List[Tuple[float, List[int]]]:
        ant_rngs = self.rng.spawn(self.n_ants)
        if self.cfg.n_jobs == 1:
            return [self._ant(P, r) for r in ant_rngs]
        with ThreadPoolExecutor(max_workers=self.cfg.n_jobs) as pool:
            return list(pool.map(lambda r: self._ant(P, r), ant_rngs))

    def _deposit(self, solutions: List[Tuple[float, List[int]]]):
        for cost, path in solutions[:self.top_k]:
            d_tau = self.cfg.Q / cost
            for i, j in edges(path, self.cfg.is_tour):
                self.tau[j, i] += d_tau

    def _evaporate(self):
        self.tau = np.clip(self.tau * (1.0 - self.cfg.rho), self.cfg.tau_min, self.cfg.tau_max)

    def _reset_pheromones(self):
        self.tau = np.full((self.n, self.n), self.cfg.tau_max)

    def step(self) -> Tuple[float, List[int]]:
        """Run one iteration and return the iteration's best (cost, path)."""
        st = self.state
        st.iteration += 1
        P = self.tau * self.eta
        # P is read-only while ants are out
        P.setflags(write=False)

        solutions = self._construct_solutions(P)
        solutions.sort(key=lambda s: s[0])
        local_cost, local_path = solutions[0]
        logger.debug("iteration %d: local best cost %.6g", st.iteration, local_cost)

        if local_cost < st.best_cost:
            if self.cfg.verbose:
                print(f"Better solution found with cost {local_cost} at iteration {st.iteration}", flush=True)
            st.best_cost = local_cost
            st.best_path = local_path
            st.no_improv = 0
        else:
            st.no_improv += 1

        self._deposit(solutions)

        if st.no_improv > self.cfg.reset_iter:
            logger.debug("iteration %d: no improvement for %d iterations, resetting pheromones",
                         st.iteration, st.no_improv)
            st.no_improv = 0
            st.n_resets += 1
            self._reset_pheromones()
        else:
            self._evaporate()

        self.history_best_costs.append(st.best_cost)
        self.history_best_paths.append(list(st.best_path))
        if self.record_pheromones:
            self.history_pheromones.append(self.tau.copy())
        return local_cost, local_path

    def run(self) -> ColonyResult:
        start = time.time()
        # reset state, pheromones and history
        self.state = ColonyState()
        self._reset_pheromones()
        self.history_best_costs = []
        self.history_best_paths = []
        self.history_pheromones = []

        logger.info("Running ant colony on %d nodes with %d ants for %d iterations",
                    self.n, self.n_ants, self.cfg.max_iter)
        if self.cfg.n_jobs > 1:
            logger.debug("Building ants on %d threads", self.cfg.n_jobs)

        for _ in range(self.cfg.max_iter):
            self.step()

        elapsed = time.time() - start
        logger.info("Best cost %.6g after %d iterations (%.3fs)",
                    self.state.best_cost, self.state.iteration, elapsed)
        return ColonyResult(best_path=list(self.state.best_path), best_cost=self.state.best_cost,
                            history_best_costs=list(self.history_best_costs),
                            history_best_paths=[list(p) for p in self.history_best_paths],
                            n_resets=self.state.n_resets, config=self.cfg, elapsed_sec=elapsed)


def aco(dist_matrix, **options) -> List[int]:
    """Approximate the shortest path (or tour) visiting every node of `dist_matrix` once.

    `dist_matrix[to, from]` is the cost of the edge from -> to. Options are the
    fields of `ColonyConfig`. Node indices are 0-based.

    Examples:
        Any tour; the start node appears only once:

        >>> aco(np.random.rand(5, 5) + 0.1, is_tour=True)   # doctest: +SKIP
        [3, 2, 4, 0, 1]

        A path from node 0 to node 4:

        >>> aco(np.random.rand(5, 5) + 0.1, start_node=0, end_node=4)   # doctest: +SKIP
        [0, 1, 3, 2, 4]
    """
    try:
        cfg = ColonyConfig(**options)
    except TypeError as e:
        raise ConfigurationError(str(e)) from e
    return AntColonyOptimizer(dist_matrix, cfg).run().best_path
