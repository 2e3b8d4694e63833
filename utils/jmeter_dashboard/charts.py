"""
Chart construction for the JMeter Report Dashboard
"""

from typing import Callable

import plotly.graph_objects as go

from .report_assembly import ReportAssembly, format_summary_label


def apply_dark_theme(fig):
    """Apply the dashboard's dark theme to a figure."""
    fig.update_layout(
        # Match panel background colors
        paper_bgcolor='#21262d',
        plot_bgcolor='#21262d',
        font=dict(color='#ffffff', family='Inter, sans-serif'),
        legend=dict(
            bgcolor='rgba(33, 38, 45, 0.9)',
            bordercolor='#666666',
            borderwidth=1,
            font=dict(color='#ffffff')
        ),
        hoverlabel=dict(
            bgcolor='#21262d',
            bordercolor='#666666',
            font_color='#ffffff'
        ),
        margin=dict(l=20, r=20, t=40, b=20)
    )
    
    for trace in fig.data:
        if hasattr(trace, 'marker') and trace.marker:
            if hasattr(trace.marker, 'line'):
                trace.marker.line.color = '#30363d'
    
    return fig


def build_summary_figure(assembly: ReportAssembly,
                         label_formatter: Callable[[str, float], str] = format_summary_label,
                         dark: bool = True) -> go.Figure:
    """Pass/fail pie chart of the report's requests summary."""
    entries = assembly.summary_entries()
    fig = go.Figure(go.Pie(
        labels=[entry.label for entry in entries],
        values=[entry.value for entry in entries],
        marker=dict(colors=[entry.color for entry in entries]),
        text=assembly.summary_labels(label_formatter),
        textinfo='text',
        hoverinfo='label+percent',
        sort=False,
    ))
    fig.update_layout(title_text="Requests Summary", showlegend=True)
    return apply_dark_theme(fig) if dark else fig
