import logging

import numpy as np
import pytest
from matplotlib.figure import Figure
from sklearn.decomposition import PCA
from pca_loadings.components.pca_analysis import FactorCountError
from pca_loadings.components.pca_plot import RELIABILITY_NOTICE, plot_pca
from pca_loadings.utils.preprocessing import scale_features


def test_clear_two_factor_structure(two_factor_data):
    result = plot_pca(two_factor_data, tolerance=0.1)

    assert result.n_factors == 2
    assert list(result.factor_index) == [1, 1, 1, 1, 1, 2, 2, 2, 2]
    assert result.removed_colindex == []
    assert result.removed_df.shape == two_factor_data.shape
    assert list(result.reliability['factor']) == [1, 2]
    # every item loads clearly on its own factor
    dominant = result.loadings.abs().max(axis=1)
    assert (dominant > 0.6).all()


def test_result_bundle_contents(two_factor_data):
    result = plot_pca(two_factor_data)

    assert list(result.loadings.columns) == ['Factor 1', 'Factor 2']
    assert len(result.df) == 9 * 2
    assert result.plot is not None
    assert result.eigen_plot is None
    assert result.notices == []
    assert set(result.adequacy) == {'bartlett', 'kmo'}
    assert result.adequacy['bartlett']['p_value'] < 0.05


def test_split_loading_item_is_removed(split_loading_data):
    result = plot_pca(split_loading_data, tolerance=0.3)

    assert result.removed_colindex == [4]
    assert result.removed_df.shape[1] == 8
    assert 'x5' not in result.removed_df.columns


def test_precomputed_pca_skips_reliability(two_factor_data, caplog):
    pca = PCA().fit(scale_features(two_factor_data))
    result = plot_pca(pca, plot_type='tile', show_cronbach=True)

    assert result.reliability is None
    assert result.removed_df is None
    assert result.adequacy is None
    assert result.notices == [RELIABILITY_NOTICE]
    assert RELIABILITY_NOTICE in caplog.text
    assert len(result.plot.layout.annotations) == 0
    assert list(result.factor_index) == [1, 1, 1, 1, 1, 2, 2, 2, 2]


def test_alpha_annotations_for_table_input(two_factor_data):
    result = plot_pca(two_factor_data, plot_type='circle')
    texts = [a.text for a in result.plot.layout.annotations]

    assert len(texts) == 2
    assert all(text.startswith('α = ') for text in texts)


def test_alpha_annotations_can_be_switched_off(two_factor_data):
    result = plot_pca(two_factor_data, plot_type='tile', show_cronbach=False)

    assert len(result.plot.layout.annotations) == 0
    assert result.reliability is not None


def test_single_factor_aborts(one_factor_data):
    with pytest.raises(FactorCountError):
        plot_pca(one_factor_data)


def test_explicit_factor_count(one_factor_data):
    result = plot_pca(one_factor_data, n_factors=2)
    assert result.n_factors == 2


def test_oblimin(two_factor_data):
    result = plot_pca(two_factor_data, rotation='oblimin')
    assert list(result.factor_index) == [1, 1, 1, 1, 1, 2, 2, 2, 2]


def test_unknown_rotation(two_factor_data):
    with pytest.raises(ValueError):
        plot_pca(two_factor_data, rotation='quartimax')


def test_missing_values_are_dropped_before_pca(two_factor_data):
    two_factor_data.iloc[0, 0] = np.nan
    result = plot_pca(two_factor_data)

    assert len(result.removed_df) == len(two_factor_data)
    assert len(result.reliability) == 2


def test_plot_eigen_logs_summary(two_factor_data, caplog):
    caplog.set_level(logging.INFO)
    result = plot_pca(two_factor_data, plot_eigen=True)

    assert isinstance(result.eigen_plot, Figure)
    assert "Eigenvalues" in caplog.text


if __name__ == "__main__":
    pytest.main()
