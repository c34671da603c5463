import pandas as pd
from pandas.api.types import is_numeric_dtype
from factor_analyzer import calculate_bartlett_sphericity, calculate_kmo


def validate_table(data):
    """Check that a table can be fed to the PCA."""
    if data.empty:
        raise ValueError("Empty dataframe provided")

    non_numeric = [col for col in data.columns if not is_numeric_dtype(data[col])]
    if non_numeric:
        raise ValueError(f"Non-numeric columns: {non_numeric}")

    complete = data.dropna()
    if complete.shape[0] < 2:
        raise ValueError("Insufficient complete data rows")
    if complete.shape[1] < 2:
        raise ValueError("Insufficient columns")

    constant = [col for col in complete.columns if complete[col].nunique() < 2]
    if constant:
        raise ValueError(f"Columns without variance: {constant}")
    return True


def scale_features(data):
    """Scale features to z-scores using the sample standard deviation."""
    # ddof=1 keeps the PCA eigenvalues equal to those of the correlation matrix
    return (data - data.mean()) / data.std(ddof=1)


def perform_bartlett_test(data):
    """Perform Bartlett's test for sphericity."""
    chi_square_value, p_value = calculate_bartlett_sphericity(data)
    return chi_square_value, p_value


def perform_kmo_test(data):
    """Perform KMO test for sampling adequacy."""
    kmo_all, kmo_model = calculate_kmo(data)
    return kmo_model


def sampling_adequacy(scaled_data):
    chi_square, p_value = perform_bartlett_test(scaled_data)
    return {
        'bartlett': {'chi_square': float(chi_square), 'p_value': float(p_value)},
        'kmo': float(perform_kmo_test(scaled_data))
    }
