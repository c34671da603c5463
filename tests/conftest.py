import matplotlib
import numpy as np
import pandas as pd
import pytest

matplotlib.use("Agg")

N_OBS = 50


def latent_factors(rng, n=N_OBS):
    """Two standardized, uncorrelated latent factors."""
    f1 = rng.normal(size=n)
    f2 = rng.normal(size=n)
    f1 = (f1 - f1.mean()) / f1.std()
    f2 = f2 - f2.mean()
    f2 = f2 - (f2 @ f1) / (f1 @ f1) * f1
    f2 = f2 / f2.std()
    return f1, f2


@pytest.fixture
def two_factor_data():
    # x1-x5 measure the first factor, x6-x9 the second
    rng = np.random.default_rng(42)
    f1, f2 = latent_factors(rng)
    items = {}
    for i in range(1, 6):
        items[f'x{i}'] = f1 + 0.3 * rng.normal(size=N_OBS)
    for i in range(6, 10):
        items[f'x{i}'] = f2 + 0.6 * rng.normal(size=N_OBS)
    return pd.DataFrame(items)


@pytest.fixture
def split_loading_data():
    # like two_factor_data, but x5 measures both factors equally
    rng = np.random.default_rng(42)
    f1, f2 = latent_factors(rng)
    items = {}
    for i in range(1, 5):
        items[f'x{i}'] = f1 + 0.3 * rng.normal(size=N_OBS)
    items['x5'] = (f1 + f2) / np.sqrt(2) + 0.3 * rng.normal(size=N_OBS)
    for i in range(6, 10):
        items[f'x{i}'] = f2 + 0.6 * rng.normal(size=N_OBS)
    return pd.DataFrame(items)


@pytest.fixture
def one_factor_data():
    rng = np.random.default_rng(3)
    f1 = rng.normal(size=N_OBS)
    return pd.DataFrame({f'y{i}': f1 + 0.5 * rng.normal(size=N_OBS) for i in range(1, 7)})
