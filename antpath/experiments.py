from __future__ import annotations
import itertools
import logging
import statistics
from dataclasses import asdict, fields, replace
from typing import Any, Dict, List, Optional

import pandas as pd

from .colony import AntColonyOptimizer, ColonyConfig
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def run_repeated_trials(dist_matrix, cfg: ColonyConfig, n_runs: int = 10, base_seed: int = 42):
    costs = []
    times = []
    best_paths = []
    for r in range(n_runs):
        cfg_r = replace(cfg, seed=base_seed + r)
        res = AntColonyOptimizer(dist_matrix, cfg_r).run()
        costs.append(res.best_cost)
        times.append(res.elapsed_sec)
        best_paths.append(res.best_path)
    stats = {
        "mean_cost": statistics.mean(costs),
        "std_cost": statistics.stdev(costs) if len(costs) > 1 else 0.0,
        "min_cost": min(costs),
        "max_cost": max(costs),
        "median_cost": statistics.median(costs),
        "mean_time": statistics.mean(times),
        "n_runs": n_runs,
    }
    return stats, list(zip(costs, times, best_paths))


def run_parameter_sweep(dist_matrix, param_grid: Dict[str, List[Any]],
                        base_cfg: Optional[ColonyConfig] = None, n_runs: int = 5, base_seed: int = 100,
                        csv_path: Optional[str] = None) -> pd.DataFrame:
    """Evaluate every combination in `param_grid` with `n_runs` seeded runs each.

    Returns one row per combination: the swept values followed by the trial stats.
    """
    base_cfg = base_cfg or ColonyConfig()
    known = {f.name for f in fields(ColonyConfig)}
    unknown = sorted(set(param_grid) - known)
    if unknown:
        raise ConfigurationError(f"Unknown parameters in grid: {', '.join(unknown)}")

    keys = sorted(param_grid.keys())
    rows = []
    combos = list(itertools.product(*[param_grid[k] for k in keys]))
    for c, values in enumerate(combos, start=1):
        cfg = ColonyConfig(**{**asdict(base_cfg), **dict(zip(keys, values))})
        logger.info("[sweep] %d/%d -> %s", c, len(combos), dict(zip(keys, values)))
        stats, _ = run_repeated_trials(dist_matrix, cfg, n_runs=n_runs, base_seed=base_seed)
        rows.append({**{k: getattr(cfg, k) for k in keys}, **stats})

    df = pd.DataFrame.from_records(rows)
    if csv_path is not None:
        df.to_csv(csv_path, index=False)
    return df
