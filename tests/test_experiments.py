import numpy as np
import pandas as pd
import pytest

from antpath import ColonyConfig, ConfigurationError, run_parameter_sweep, run_repeated_trials


@pytest.fixture
def dist8():
    return np.random.default_rng(8).random((8, 8)) + 0.1


def test_repeated_trials_stats(dist8):
    stats, details = run_repeated_trials(dist8, ColonyConfig(max_iter=3, is_tour=True), n_runs=4, base_seed=1)
    assert stats["n_runs"] == 4
    assert len(details) == 4
    costs = [c for c, _, _ in details]
    assert stats["min_cost"] == min(costs)
    assert stats["max_cost"] == max(costs)
    assert stats["min_cost"] <= stats["median_cost"] <= stats["max_cost"]
    for _, _, path in details:
        assert sorted(path) == list(range(8))


def test_repeated_trials_are_seeded(dist8):
    cfg = ColonyConfig(max_iter=3, q=0.5)
    a, _ = run_repeated_trials(dist8, cfg, n_runs=2, base_seed=7)
    b, _ = run_repeated_trials(dist8, cfg, n_runs=2, base_seed=7)
    assert a["mean_cost"] == b["mean_cost"]


def test_single_run_has_zero_std(dist8):
    stats, _ = run_repeated_trials(dist8, ColonyConfig(max_iter=2), n_runs=1)
    assert stats["std_cost"] == 0.0


def test_parameter_sweep_writes_csv(dist8, tmp_path):
    csv_path = tmp_path / "sweep.csv"
    grid = {"rho": [0.1, 0.5], "q": [0.0, 0.3]}
    df = run_parameter_sweep(dist8, grid, base_cfg=ColonyConfig(max_iter=2), n_runs=2,
                             csv_path=str(csv_path))
    assert isinstance(df, pd.DataFrame)
    assert len(df) == 4
    assert {"q", "rho", "mean_cost", "n_runs"} <= set(df.columns)
    assert sorted(zip(df["q"], df["rho"])) == [(0.0, 0.1), (0.0, 0.5), (0.3, 0.1), (0.3, 0.5)]
    written = pd.read_csv(csv_path)
    assert len(written) == 4


def test_parameter_sweep_rejects_unknown_parameter(dist8):
    with pytest.raises(ConfigurationError):
        run_parameter_sweep(dist8, {"alpha": [1.0]})
