import io
import logging

import pandas as pd
import streamlit as st

from pca_loadings.components.pca_analysis import ROTATIONS, FactorCountError
from pca_loadings.components.pca_plot import plot_pca
from pca_loadings.components.loading_plot import PLOT_TYPES
from pca_loadings.utils.data_loader import get_sample_data, load_table, sample_data_excel


def results_workbook(result):
    """Write all result tables to an in-memory Excel workbook."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
        result.loadings.to_excel(writer, sheet_name='Loadings')
        result.factor_index.to_frame().to_excel(writer, sheet_name='Factor_Index')
        if result.reliability is not None:
            result.reliability.to_excel(writer, sheet_name='Reliability', index=False)
        if result.removed_df is not None:
            result.removed_df.to_excel(writer, sheet_name='Clear_Items', index=False)
        result.df.to_excel(writer, sheet_name='Plot_Data', index=False)
    output.seek(0)
    return output


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')
    st.set_page_config(page_title="PCA Loadings", page_icon=":bar_chart:", layout="wide")
    st.title("Principal Component Analysis with Rotated Loadings")

    col1, col2 = st.columns([2, 1])
    with col1:
        data_file = st.file_uploader("Upload your data", type=["csv", "xlsx"],
                                     help="One column per numeric variable, one row per observation")
    with col2:
        st.download_button(
            label="Download Sample Data",
            data=sample_data_excel(),
            file_name="sample_data.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        use_sample = st.checkbox("Use sample data")

    if data_file is None and not use_sample:
        return

    try:
        df = get_sample_data() if use_sample else load_table(data_file)
    except Exception as e:
        st.error(f"Error in data loading: {str(e)}")
        return
    st.dataframe(df, use_container_width=True)

    # Analysis parameters
    st.sidebar.header("Analysis Parameters")
    columns = st.sidebar.multiselect("Variables", options=list(df.columns), default=list(df.columns))
    rotation = st.sidebar.selectbox("Rotation", ROTATIONS)
    n_factors = st.sidebar.number_input("Number of factors (0 = Kaiser criterion)", min_value=0, value=0)
    tolerance = st.sidebar.slider("Loading tolerance", min_value=0.0, max_value=0.5, value=0.1, step=0.01)
    plot_type = st.sidebar.selectbox("Plot type", PLOT_TYPES)
    show_values = st.sidebar.checkbox("Show values", value=True)
    show_cronbach = st.sidebar.checkbox("Show Cronbach's alpha", value=True)
    plot_eigen = st.sidebar.checkbox("Plot eigenvalues", value=False)
    title = st.sidebar.text_input("Title", value="")

    if not st.button("Run PCA"):
        return

    try:
        result = plot_pca(
            df[columns],
            rotation=rotation,
            n_factors=n_factors or None,
            tolerance=tolerance,
            plot_eigen=plot_eigen,
            title=title or None,
            plot_type=plot_type,
            show_values=show_values,
            show_cronbach=show_cronbach
        )
    except FactorCountError as e:
        st.error(str(e))
        return
    except Exception as e:
        st.error(f"Error in PCA: {str(e)}")
        return

    for notice in result.notices:
        st.info(notice)

    tabs = st.tabs(["Loadings", "Diagnostics", "Download Results"])
    with tabs[0]:
        st.plotly_chart(result.plot, use_container_width=True)
        st.subheader(f"Rotated Loadings ({result.n_factors} factors, {rotation})")
        st.dataframe(result.loadings, use_container_width=True)
        st.subheader("Factor Index")
        st.dataframe(result.factor_index.to_frame(), use_container_width=True)

    with tabs[1]:
        if result.eigen_plot is not None:
            st.pyplot(result.eigen_plot)
        st.subheader("Items Without Clear Factor Loading")
        unclear = [columns[i] for i in result.removed_colindex]
        st.write(", ".join(unclear) if unclear else "none.")
        if result.reliability is not None:
            st.subheader("Cronbach's Alpha")
            st.dataframe(result.reliability, use_container_width=True)
        if result.adequacy is not None:
            bartlett = result.adequacy['bartlett']
            st.write(f"Bartlett's test: Chi-square value = {bartlett['chi_square']:.2f}, "
                     f"p-value = {bartlett['p_value']:.4f}")
            st.write(f"KMO value = {result.adequacy['kmo']:.2f}")

    with tabs[2]:
        st.download_button(
            label="Download All Results (Excel)",
            data=results_workbook(result),
            file_name="pca_results.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            use_container_width=True
        )


if __name__ == "__main__":
    main()
