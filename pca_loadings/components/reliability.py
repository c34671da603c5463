import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def cronbach_alpha(items):
    """
    Cronbach's alpha for internal consistency.

    Args:
        items: DataFrame with one column per item of the scale.

    Returns:
        Alpha coefficient, NaN when it is undefined.
    """
    items_complete = items.dropna()
    k = items_complete.shape[1]
    if k < 2:
        logger.warning(f"Cronbach's alpha needs at least two items, got {k}")
        return np.nan

    item_vars = items_complete.var(axis=0, ddof=1)
    total_var = items_complete.sum(axis=1).var(ddof=1)
    if not total_var > 0:
        logger.warning("Cronbach's alpha is undefined for a scale without variance")
        return np.nan

    return float((k / (k - 1)) * (1 - item_vars.sum() / total_var))


def factor_reliability(data, factor_index):
    """Cronbach's alpha of each factor scale.

    All items with their highest loading on the same factor form one scale.
    Returns one row per occupied factor, in ascending factor order.
    """
    factor_index = np.asarray(factor_index)
    rows = []
    for factor in np.unique(factor_index):
        scale = data.loc[:, factor_index == factor].dropna()
        rows.append({'factor': int(factor), 'alpha': cronbach_alpha(scale)})
    return pd.DataFrame(rows, columns=['factor', 'alpha'])
