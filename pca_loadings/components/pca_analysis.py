import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from factor_analyzer.rotator import Rotator
from sklearn.decomposition import PCA

from pca_loadings.utils.preprocessing import scale_features, validate_table

logger = logging.getLogger(__name__)

ROTATIONS = ('varimax', 'oblimin')


class FactorCountError(ValueError):
    """Raised when the number of factors to rotate is not usable."""


@dataclass(frozen=True)
class TableInput:
    """Raw observations together with the PCA fitted on their complete rows."""
    data: pd.DataFrame
    pca: PCA

    @property
    def variables(self):
        return [str(col) for col in self.data.columns]


@dataclass(frozen=True)
class PrecomputedInput:
    """A PCA fitted elsewhere; the observations are not available."""
    pca: PCA

    @property
    def variables(self):
        names = getattr(self.pca, 'feature_names_in_', None)
        if names is not None:
            return [str(name) for name in names]
        return [f'V{i+1}' for i in range(self.pca.components_.shape[1])]


def compute_pca(data):
    """Run a PCA on the standardized, row-wise complete data."""
    validate_table(data)
    complete = data.dropna()
    if len(complete) < len(data):
        logger.debug(f"Dropped {len(data) - len(complete)} rows with missing values before PCA")

    pca = PCA()
    pca.fit(scale_features(complete))
    return pca


def to_pca_input(data):
    """Normalize a DataFrame, a 2-D array or a fitted PCA into one of the input variants."""
    if isinstance(data, PCA):
        if not hasattr(data, 'components_'):
            raise ValueError("The PCA object has not been fitted")
        return PrecomputedInput(pca=data)
    if isinstance(data, np.ndarray):
        if data.ndim != 2:
            raise ValueError("Expected a 2-D array of observations")
        data = pd.DataFrame(data, columns=[f'V{i+1}' for i in range(data.shape[1])])
    if isinstance(data, pd.DataFrame):
        return TableInput(data=data, pca=compute_pca(data))
    raise TypeError(f"Unsupported data type for PCA: {type(data)}")


def get_eigenvalues(pca):
    """Eigenvalues, i.e. the squared standard deviations of the components."""
    return np.asarray(pca.explained_variance_, dtype=float)


def estimate_factor_count(eigenvalues, n_factors=None):
    """Number of factors to retain: the Kaiser criterion unless n_factors is given."""
    eigenvalues = np.asarray(eigenvalues, dtype=float)
    if n_factors is not None:
        count = int(n_factors)
    else:
        below_one = np.flatnonzero(eigenvalues < 1)
        count = int(below_one[0]) if below_one.size else len(eigenvalues)

    if count < 2:
        raise FactorCountError(
            "Only one principal component extracted. Can't rotate loading matrices. "
            "You may use `n_factors` to extract more than one component."
        )
    if count > len(eigenvalues):
        raise FactorCountError(
            f"Cannot extract {count} factors from {len(eigenvalues)} components. "
            "Use `n_factors` to request fewer."
        )
    logger.debug(f"Retaining {count} factors")
    return count


def unrotated_loadings(pca, n_factors):
    """Component loadings scaled by the component standard deviations."""
    sdev = np.sqrt(get_eigenvalues(pca)[:n_factors])
    return pca.components_[:n_factors].T * sdev


def rotate_loadings(pca_input, n_factors, rotation='varimax'):
    """Rotate the first n_factors loadings. Returns the loading table and the fitted rotator."""
    if rotation not in ROTATIONS:
        raise ValueError(f"Unknown rotation '{rotation}', expected one of {ROTATIONS}")

    rotator = Rotator(method=rotation)
    rotated = rotator.fit_transform(unrotated_loadings(pca_input.pca, n_factors))

    loadings = pd.DataFrame(
        rotated,
        columns=[f'Factor {i+1}' for i in range(n_factors)],
        index=pca_input.variables
    )
    return loadings, rotator


def pca_summary(pca):
    """Importance of components: standard deviation and explained variance."""
    proportion = np.asarray(pca.explained_variance_ratio_, dtype=float)
    return pd.DataFrame(
        {
            'Standard deviation': np.sqrt(get_eigenvalues(pca)),
            'Proportion of Variance': proportion,
            'Cumulative Proportion': np.cumsum(proportion)
        },
        index=[f'PC{i+1}' for i in range(len(proportion))]
    ).T


def plot_eigenvalues(eigenvalues, n_factors):
    """Generate a scree plot marking the eigenvalues above 1."""
    eigenvalues = np.asarray(eigenvalues, dtype=float)
    positions = np.arange(1, len(eigenvalues) + 1)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(positions, eigenvalues, color='grey')
    ax.scatter(positions, eigenvalues, c=np.where(eigenvalues > 1, '#00BFC4', '#F8766D'), zorder=3)
    ax.axhline(1, linestyle='--', color='grey')
    ax.text(0.98, 0.98, f'Factors: {n_factors}', transform=ax.transAxes,
            ha='right', va='top')
    ax.set_xticks(positions[::2])
    ax.set_xlabel('Number of factors')
    ax.set_ylabel('Eigenvalue')
    ax.grid()
    return fig
