import logging
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd
import plotly.graph_objects as go
from factor_analyzer.rotator import Rotator
from matplotlib.figure import Figure

from pca_loadings.components.loading_plot import (
    DEFAULT_GEOM_SIZE,
    build_plot_data,
    plot_loadings,
    resolve_plot_type,
    wrap_text,
)
from pca_loadings.components.loadings import (
    DEFAULT_TOLERANCE,
    assign_dominant_factors,
    find_ambiguous_items,
)
from pca_loadings.components.pca_analysis import (
    ROTATIONS,
    TableInput,
    estimate_factor_count,
    get_eigenvalues,
    pca_summary,
    plot_eigenvalues,
    rotate_loadings,
    to_pca_input,
)
from pca_loadings.components.reliability import factor_reliability
from pca_loadings.utils.preprocessing import sampling_adequacy, scale_features

logger = logging.getLogger(__name__)

RELIABILITY_NOTICE = (
    "Cronbach's Alpha can only be calculated when having a data frame "
    "with each component / variable as column."
)


@dataclass
class PCAPlotResult:
    loadings: pd.DataFrame
    rotator: Rotator
    n_factors: int
    removed_colindex: list
    removed_df: Optional[pd.DataFrame]
    factor_index: pd.Series
    plot: go.Figure
    df: pd.DataFrame
    reliability: Optional[pd.DataFrame] = None
    eigen_plot: Optional[Figure] = None
    adequacy: Optional[dict] = None
    notices: list = field(default_factory=list)


def plot_pca(data,
             rotation='varimax',
             n_factors=None,
             tolerance=DEFAULT_TOLERANCE,
             plot_eigen=False,
             digits=2,
             title=None,
             axis_labels=None,
             plot_type='bar',
             geom_size=None,
             geom_colors='RdBu',
             wrap_title=50,
             wrap_labels=30,
             show_values=True,
             show_cronbach=True):
    """Rotate the PCA loadings of a table (or of a fitted PCA) and plot them.

    When a DataFrame is passed, the PCA is computed on its complete rows
    and Cronbach's alpha is calculated for each factor scale, i.e. for all
    items with their highest loading on the same factor. A fitted
    scikit-learn PCA can be passed instead; reliability is then skipped
    and a notice is recorded in the result.
    """
    if rotation not in ROTATIONS:
        raise ValueError(f"Unknown rotation '{rotation}', expected one of {ROTATIONS}")
    plot_type = resolve_plot_type(plot_type)
    if geom_size is None:
        geom_size = DEFAULT_GEOM_SIZE[plot_type]

    pca_input = to_pca_input(data)
    has_table = isinstance(pca_input, TableInput)
    annotate_alpha = show_cronbach and has_table
    notices = []

    eigenvalues = get_eigenvalues(pca_input.pca)
    factor_count = estimate_factor_count(eigenvalues, n_factors)

    eigen_plot = None
    if plot_eigen:
        eigen_plot = plot_eigenvalues(eigenvalues, factor_count)
        logger.info(f"PCA summary:\n{pca_summary(pca_input.pca).to_string()}")
        logger.info(f"Eigenvalues: {eigenvalues.round(4).tolist()}")

    loadings, rotator = rotate_loadings(pca_input, factor_count, rotation)

    factor_index = assign_dominant_factors(loadings)
    removable = find_ambiguous_items(loadings, tolerance)
    unclear = [pca_input.variables[i] for i in removable]
    logger.info(f"Following items have no clear factor loading: {', '.join(unclear) or 'none.'}")

    reliability = None
    adequacy = None
    removed_df = None
    if has_table:
        reliability = factor_reliability(pca_input.data, factor_index.values)
        adequacy = sampling_adequacy(scale_features(pca_input.data.dropna()))
        removed_df = pca_input.data.drop(columns=pca_input.data.columns[removable])
    else:
        logger.warning(RELIABILITY_NOTICE)
        notices.append(RELIABILITY_NOTICE)

    if axis_labels is None:
        axis_labels = pca_input.variables
    plot_df = build_plot_data(loadings, geom_size, axis_labels, wrap_labels)
    fig = plot_loadings(
        plot_df,
        plot_type=plot_type,
        geom_colors=geom_colors,
        geom_size=geom_size,
        title=wrap_text(title, wrap_title),
        digits=digits,
        show_values=show_values,
        reliability=reliability if annotate_alpha else None
    )

    return PCAPlotResult(
        loadings=loadings,
        rotator=rotator,
        n_factors=factor_count,
        removed_colindex=removable,
        removed_df=removed_df,
        factor_index=factor_index,
        plot=fig,
        df=plot_df,
        reliability=reliability,
        eigen_plot=eigen_plot,
        adequacy=adequacy,
        notices=notices
    )
