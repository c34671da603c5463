import numpy as np
import pandas as pd

DEFAULT_TOLERANCE = 0.1


def find_ambiguous_items(loadings, tolerance=DEFAULT_TOLERANCE):
    """Row positions of items whose two highest absolute loadings differ by less than tolerance.

    Such items do not load clearly on a single factor. The positions are
    returned in row order so they can be used to drop the matching columns
    from the analysed table.
    """
    if tolerance < 0:
        raise ValueError("tolerance must not be negative")

    values = np.abs(np.asarray(loadings, dtype=float))
    if values.ndim != 2 or values.shape[1] < 2:
        raise ValueError("Need a loading matrix with at least two factors")

    removable = []
    for i, row in enumerate(values):
        # highest and second highest loading of this item
        max_load, second_load = np.sort(row)[::-1][:2]
        if abs(max_load - second_load) < tolerance:
            removable.append(i)
    return removable


def assign_dominant_factors(loadings):
    """Factor number (starting at 1) on which each item has its highest absolute loading.

    Ties go to the first factor, as with argmax.
    """
    values = np.abs(np.asarray(loadings, dtype=float))
    index = getattr(loadings, 'index', None)
    return pd.Series(values.argmax(axis=1) + 1, index=index, name='factor')
