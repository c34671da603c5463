import textwrap

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

PLOT_TYPES = ('bar', 'circle', 'tile')

# Bars and tiles are sized in axis units, circles in pixels
DEFAULT_GEOM_SIZE = {
    'bar': 0.6,
    'circle': 10,
    'tile': 0.6
}

GREY_PALETTE = px.colors.sequential.Greys


def resolve_plot_type(plot_type):
    """Accept a plot type or its initial letter."""
    for candidate in PLOT_TYPES:
        if plot_type and candidate.startswith(plot_type):
            return candidate
    raise ValueError(f"Unknown plot type '{plot_type}', expected one of {PLOT_TYPES}")


def resolve_colors(geom_colors):
    """Map a ColorBrewer palette name or 'gs' to a list of colors, pass anything else through."""
    if isinstance(geom_colors, str):
        if geom_colors == 'gs':
            return GREY_PALETTE
        palette = getattr(px.colors.colorbrewer, geom_colors, None)
        if isinstance(palette, list):
            return palette
    return geom_colors


def wrap_text(text, width):
    if text is None:
        return None
    return '<br>'.join(textwrap.wrap(str(text), width)) or str(text)


def build_plot_data(loadings, geom_size, axis_labels=None, wrap_labels=30):
    """Long-format table with one row per item and factor."""
    values = np.asarray(loadings, dtype=float)
    n_items, n_factors = values.shape

    if axis_labels is None:
        axis_labels = list(getattr(loadings, 'index', range(1, n_items + 1)))
    if len(axis_labels) != n_items:
        raise ValueError(f"Expected {n_items} axis labels, got {len(axis_labels)}")

    wide = pd.DataFrame(values, columns=range(1, n_factors + 1))
    plot_df = wide.melt(var_name='xpos', value_name='value')
    plot_df['ypos'] = np.tile(np.arange(1, n_items + 1), n_factors)
    plot_df['psize'] = np.exp(plot_df['value'].abs()) * geom_size
    plot_df['label'] = np.tile([wrap_text(label, wrap_labels) for label in axis_labels], n_factors)
    return plot_df


def _value_labels(plot_df, digits):
    return plot_df['value'].map(lambda v: f'{v:.{digits}f}')


def _bar_chart(plot_df, colors, geom_size, value_labels, show_values):
    bar_df = plot_df.assign(magnitude=plot_df['value'].abs(), text=value_labels)
    fig = px.bar(
        bar_df,
        x='magnitude',
        y='ypos',
        facet_col='xpos',
        orientation='h',
        color='value',
        color_continuous_scale=colors,
        range_color=(-1, 1),
        text='text' if show_values else None
    )
    fig.update_traces(width=geom_size, textposition='outside')
    fig.update_xaxes(range=[0, 1], dtick=0.2, title_text=None)
    # facet titles read "xpos=1", keep the factor number only
    fig.for_each_annotation(lambda a: a.update(text=a.text.split('=')[-1]))
    return fig


def _tile_chart(plot_df, colors, value_labels, show_values):
    heatmap = go.Heatmap(
        x=plot_df['xpos'],
        y=plot_df['ypos'],
        z=plot_df['value'],
        zmin=-1,
        zmax=1,
        colorscale=colors,
        showscale=False
    )
    if show_values:
        heatmap.update(text=value_labels, texttemplate='%{text}')
    return go.Figure(heatmap)


def _circle_chart(plot_df, colors, value_labels, show_values):
    return go.Figure(go.Scatter(
        x=plot_df['xpos'],
        y=plot_df['ypos'],
        mode='markers+text' if show_values else 'markers',
        text=value_labels if show_values else None,
        marker=dict(
            size=plot_df['psize'],
            color=plot_df['value'],
            cmin=-1,
            cmax=1,
            colorscale=colors,
            showscale=False,
            line=dict(width=1, color='black')
        )
    ))


def plot_loadings(plot_df, plot_type='bar', geom_colors='RdBu', geom_size=None,
                  title=None, digits=2, show_values=True, reliability=None):
    """Plot factor loadings as bars, circles or tiles.

    Negative loadings are drawn in the low end of the palette and positive
    ones in the high end, on a fixed [-1, 1] scale. When a reliability table
    is given, the alpha of each factor scale is written above its column
    (circle and tile charts only).
    """
    plot_type = resolve_plot_type(plot_type)
    colors = resolve_colors(geom_colors)
    if geom_size is None:
        geom_size = DEFAULT_GEOM_SIZE[plot_type]
    value_labels = _value_labels(plot_df, digits)

    if plot_type == 'bar':
        fig = _bar_chart(plot_df, colors, geom_size, value_labels, show_values)
    elif plot_type == 'tile':
        fig = _tile_chart(plot_df, colors, value_labels, show_values)
    else:
        fig = _circle_chart(plot_df, colors, value_labels, show_values)

    items = plot_df.drop_duplicates('ypos').sort_values('ypos')
    fig.update_yaxes(
        tickvals=items['ypos'].tolist(),
        ticktext=items['label'].tolist(),
        autorange='reversed',
        title_text=None
    )

    if plot_type != 'bar':
        factors = sorted(int(f) for f in plot_df['xpos'].unique())
        fig.update_xaxes(tickvals=factors, title_text=None)
        if reliability is not None:
            for row in reliability.itertuples():
                fig.add_annotation(
                    x=row.factor,
                    y=1,
                    yref='paper',
                    yanchor='bottom',
                    text=f'α = {row.alpha:.{digits}f}',
                    showarrow=False
                )

    fig.update_layout(title=title, coloraxis_showscale=False, showlegend=False)
    return fig
