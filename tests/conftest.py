import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


def random_distances(n, seed=0):
    # strictly positive, asymmetric
    return np.random.default_rng(seed).random((n, n)) + 0.1


@pytest.fixture
def dist5():
    return random_distances(5, seed=5)


@pytest.fixture
def dist10():
    return random_distances(10, seed=10)
