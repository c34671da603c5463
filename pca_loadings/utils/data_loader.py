import io
import logging
from pathlib import Path

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {'.xlsx', '.xls'}


def load_table(source, sheet_name=0):
    """Load a CSV or Excel file (path or uploaded file object) into a DataFrame."""
    name = getattr(source, 'name', source)
    suffix = Path(str(name)).suffix.lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            data = pd.read_excel(source, sheet_name=sheet_name)
        else:
            data = pd.read_csv(source)
    except Exception as e:
        logger.error(f"Error loading data from {name}: {e}")
        raise
    logger.debug(f"Loaded {data.shape[0]} rows and {data.shape[1]} columns from {name}")
    return data


def get_sample_data(n_obs=60, seed=7):
    """Synthetic coping questionnaire: items 1-5 and 6-9 form two scales on a 1-4 response format."""
    rng = np.random.default_rng(seed)
    emotional = rng.normal(size=n_obs)
    practical = rng.normal(size=n_obs)

    items = {}
    for i in range(1, 6):
        items[f'cop{i}'] = emotional + rng.normal(scale=0.6, size=n_obs)
    for i in range(6, 10):
        items[f'cop{i}'] = practical + rng.normal(scale=0.6, size=n_obs)

    sample = pd.DataFrame(items)
    # Map the latent scores onto the response scale
    sample = sample.apply(lambda col: pd.cut(col, bins=4, labels=False) + 1).astype(float)
    # A couple of skipped answers, as in real survey data
    sample.iloc[3, 2] = np.nan
    sample.iloc[17, 7] = np.nan
    return sample


def sample_data_excel():
    """Write the sample data to an in-memory Excel workbook."""
    output = io.BytesIO()
    output.name = 'sample_data.xlsx'
    with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
        get_sample_data().to_excel(writer, sheet_name='COPE', index=False)
    output.seek(0)
    return output
