#!/usr/bin/env python3
"""
Interactive Dashboard for JMeter Report Data

A Plotly Dash application displaying the tables of a JMeter HTML report
(Apdex, Statistics, Errors, Top 5 errors by sampler) with the report's
series filter, controllers-only toggle and column sorting, plus the
pass/fail summary chart.
"""

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import dash
from dash import dcc, html, Input, Output, State, dash_table, ALL, MATCH

from .cache import pattern_cache
from .charts import build_summary_figure
from .data_processor import ReportDataProcessor
from .exporter import export_static_report
from .filters import FilterConfigurationError, FilterController, FilterState
from .report_assembly import ReportAssembly
from .sorting import column_id, from_dash_sort_by, to_dash_sort_by
from .table_renderer import RenderedTable

logger = logging.getLogger(__name__)

CONTROLLERS_ONLY = 'controllers-only'
FILTERS_ONLY_SAMPLE_SERIES = 'filters-only-sample-series'

DASHBOARD_CSS = '''
body { margin: 0; background: #0d1117; color: #f0f6fc; font-family: Inter, sans-serif; }
.dashboard-container { display: flex; min-height: 100vh; }
.sidebar { width: 280px; padding: 20px; background: #161b22; border-right: 1px solid #30363d; }
.main-content { flex: 1; padding: 20px 30px; overflow-x: auto; }
.header-title { font-size: 1.4rem; margin-top: 0; }
.filter-section { margin-bottom: 25px; }
.filter-section input[type=text] { width: 100%; box-sizing: border-box; padding: 6px 8px;
    background: #0d1117; color: #f0f6fc; border: 1px solid #30363d; border-radius: 6px; }
.report-section { margin-bottom: 35px; }
.status-error { color: #f85149; font-weight: bold; }
.status-ok { color: #2da44e; }
'''

TABLE_STYLE = {
    'style_table': {'overflowX': 'auto', 'width': '100%', 'backgroundColor': '#21262d'},
    'style_cell': {
        'textAlign': 'center',
        'padding': '8px',
        'fontFamily': 'Inter, sans-serif',
        'fontSize': '12px',
        'backgroundColor': '#21262d',
        'color': '#f0f6fc',
        'border': '1px solid #30363d'
    },
    'style_header': {
        'backgroundColor': '#161b22',
        'fontWeight': 'bold',
        'color': '#f0f6fc',
        'border': '1px solid #30363d'
    },
}


def table_columns(rendered: RenderedTable) -> List[Dict]:
    """DataTable columns; grouped super-headers become multi-level names."""
    titles = rendered.titles
    if len(rendered.header_rows) > 1:
        groups = []
        for cell in rendered.header_rows[0]:
            groups.extend([cell.label] * cell.colspan)
        return [{'name': [group, title], 'id': column_id(index)}
                for index, (group, title) in enumerate(zip(groups, titles))]
    return [{'name': title, 'id': column_id(index)} for index, title in enumerate(titles)]


def table_records(rendered: RenderedTable) -> List[Dict]:
    """DataTable records: the pinned row first, then the item rows in their current order."""
    rows = ([rendered.pinned] if rendered.pinned else []) + list(rendered.rows)
    return [{column_id(index): cell for index, cell in enumerate(row.cells)} for row in rows]


class DashboardApp:
    """Main Dash application for the interactive JMeter report."""

    def __init__(self, assembly: ReportAssembly, initial_state: Optional[FilterState] = None,
                 title: str = "JMeter Report Dashboard"):
        self.assembly = assembly
        self.initial_state = initial_state or FilterState()
        self.title = title
        self.app = dash.Dash(__name__, title=title)

        self.app.index_string = '''
        <!DOCTYPE html>
        <html>
            <head>
                {%metas%}
                <title>{%title%}</title>
                {%favicon%}
                {%css%}
                <style>''' + DASHBOARD_CSS + '''</style>
            </head>
            <body>
                {%app_entry%}
                <footer>
                    {%config%}
                    {%scripts%}
                    {%renderer%}
                </footer>
            </body>
        </html>
        '''

        self.setup_layout()
        self.setup_callbacks()

    def create_table_section(self, table_id: str, rendered: RenderedTable) -> html.Div:
        """One report table: pinned aggregate row fixed on top of the sortable item rows."""
        pinned_rows = 1 if rendered.pinned else 0
        style_data_conditional = [{'if': {'row_index': 'odd'}, 'backgroundColor': '#161b22'}]
        if pinned_rows:
            style_data_conditional.append(
                {'if': {'row_index': 0}, 'fontWeight': 'bold', 'backgroundColor': '#0d1117'}
            )

        return html.Div([
            html.H3(self.assembly.title(table_id)),
            dcc.Store(id={'type': 'rendered-store', 'index': table_id}, data=rendered.to_dict()),
            dash_table.DataTable(
                id={'type': 'report-table', 'index': table_id},
                columns=table_columns(rendered),
                data=table_records(rendered),
                sort_action='custom',
                sort_mode='multi',
                sort_by=to_dash_sort_by(rendered.sort_spec),
                merge_duplicate_headers=len(rendered.header_rows) > 1,
                fixed_rows={'headers': True, 'data': pinned_rows},
                style_data_conditional=style_data_conditional,
                **TABLE_STYLE
            ),
        ], className="report-section")

    def setup_layout(self):
        """Setup the main dashboard layout."""
        state = self.initial_state
        rendered = self.assembly.render_all(state)

        self.app.layout = html.Div(children=[
            html.Div([
                # Sidebar Controls
                html.Div([
                    html.H1(self.title, className="header-title"),

                    html.Div([
                        html.H3("Filters"),
                        dcc.Checklist(
                            id='controllers-only-filter',
                            options=[{'label': 'Show controllers only', 'value': CONTROLLERS_ONLY}],
                            value=[CONTROLLERS_ONLY] if state.show_controllers_only else [],
                        ),
                        html.Label("Series filter (regex):"),
                        dcc.Input(
                            id='series-filter',
                            type='text',
                            value=state.series_filter,
                            debounce=True,
                            placeholder='e.g. Login|Buy',
                        ),
                        dcc.Checklist(
                            id='filters-only-sample-series',
                            options=[{'label': 'Filter only sample series', 'value': FILTERS_ONLY_SAMPLE_SERIES}],
                            value=[FILTERS_ONLY_SAMPLE_SERIES] if state.filters_only_sample_series else [],
                        ),
                        html.Div(id='filter-status', style={'margin-top': '10px'}),
                    ], className="filter-section"),

                    html.Div([
                        html.Button(['Clear Cache'], id='clear-cache-button', n_clicks=0),
                        html.Div(id='cache-status', style={'margin-top': '10px'}),
                    ], className="filter-section"),
                ], className="sidebar"),

                # Main Content
                html.Div([
                    dcc.Graph(id='requests-summary', figure=build_summary_figure(self.assembly)),
                    *[self.create_table_section(table_id, rendered[table_id]) for table_id in rendered],
                ], className="main-content"),
            ], className="dashboard-container"),

            dcc.Store(id='filter-state-store', data=state.to_dict()),
        ])

    def apply_filters(self, controllers_only: Sequence, series_filter: Optional[str],
                      filters_only_sample_series: Sequence, stored_state: Optional[Dict],
                      table_ids: Sequence[str]) -> Tuple[Dict, html.Div, List[Optional[Dict]]]:
        """Validate the filter controls and re-render the affected tables.

        Returns the state to store, a status element, and one rendered table
        dict per requested table id (None where the table is unaffected).
        On an invalid series filter the stored state is returned unchanged.
        """
        controller = FilterController(FilterState.from_dict(stored_state))
        updates: Dict[str, Dict] = {}

        def rerender(old_state: FilterState, new_state: FilterState):
            for table_id in self.assembly.affected_tables(old_state, new_state):
                updates[table_id] = self.assembly.render(table_id, new_state).to_dict()

        controller.subscribe(rerender)
        try:
            state = controller.apply_controls(
                CONTROLLERS_ONLY in (controllers_only or []),
                series_filter,
                FILTERS_ONLY_SAMPLE_SERIES in (filters_only_sample_series or []),
            )
        except FilterConfigurationError as e:
            status = html.Div(str(e), className="status-error")
            return controller.state.to_dict(), status, [None] * len(table_ids)

        status = html.Div(f"{len(updates)} tables updated", className="status-ok") if updates else html.Div()
        return state.to_dict(), status, [updates.get(table_id) for table_id in table_ids]

    def sort_table(self, rendered_data: Dict, sort_by: Optional[List[Dict]]) -> List[Dict]:
        """Records of a rendered table reordered by the DataTable's sort_by."""
        rendered = RenderedTable.from_dict(rendered_data)
        if sort_by:
            rendered = rendered.sorted(from_dash_sort_by(sort_by, rendered.width))
        return table_records(rendered)

    def setup_callbacks(self):
        """Setup all dashboard callbacks."""

        @self.app.callback(
            Output('cache-status', 'children'),
            [Input('clear-cache-button', 'n_clicks')],
            prevent_initial_call=True
        )
        def clear_cache(n_clicks):
            if n_clicks > 0:
                pattern_cache.clear()
                return html.Span("Cache cleared", className="status-ok")
            return html.Div()

        @self.app.callback(
            [Output('filter-state-store', 'data'),
             Output('filter-status', 'children'),
             Output({'type': 'rendered-store', 'index': ALL}, 'data')],
            [Input('controllers-only-filter', 'value'),
             Input('series-filter', 'value'),
             Input('filters-only-sample-series', 'value')],
            [State('filter-state-store', 'data')],
            prevent_initial_call=True
        )
        def update_filters(controllers_only, series_filter, filters_only_sample_series, stored_state):
            table_ids = [output['id']['index'] for output in dash.callback_context.outputs_list[2]]
            state, status, rendered = self.apply_filters(
                controllers_only, series_filter, filters_only_sample_series, stored_state, table_ids
            )
            return state, status, [data if data is not None else dash.no_update for data in rendered]

        @self.app.callback(
            Output({'type': 'report-table', 'index': MATCH}, 'data'),
            [Input({'type': 'rendered-store', 'index': MATCH}, 'data'),
             Input({'type': 'report-table', 'index': MATCH}, 'sort_by')],
        )
        def update_table(rendered_data, sort_by):
            return self.sort_table(rendered_data, sort_by)

    def run(self, host='127.0.0.1', port=8050, debug=True):
        """Run the dashboard server."""
        logger.info(f"Starting dashboard at http://{host}:{port}")
        self.app.run(host=host, port=port, debug=debug)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="JMeter Report Dashboard")
    parser.add_argument("--data", required=True,
                        help="Report data directory or file (JSON bundle or JMeter dashboard.js)")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8050, help="Port to bind to (default: 8050)")
    parser.add_argument("--debug", action="store_true", default=False, help="Enable Dash debug mode")
    parser.add_argument("--export", metavar="PATH", help="Write a static HTML report instead of serving")
    parser.add_argument("--title", default="JMeter Report Dashboard", help="Report title")
    parser.add_argument("--series-filter", default="", help="Initial series filter (case-insensitive regex)")
    parser.add_argument("--controllers-only", action="store_true", default=False,
                        help="Initially show controllers only")
    parser.add_argument("--no-filters-only-sample-series", dest="filters_only_sample_series",
                        action="store_false", default=True,
                        help="Apply the series filter to every table, not only sample series tables")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level (default: INFO)")
    return parser

def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    data_path = Path(args.data)
    if not data_path.exists():
        logger.error(f"Report data path does not exist: {data_path}")
        return 1

    data_store = ReportDataProcessor(data_path).process_all_data()
    if not data_store['tables']:
        logger.error("No report tables found in the specified path")
        return 1

    try:
        initial_state = FilterController().apply_controls(
            args.controllers_only, args.series_filter, args.filters_only_sample_series
        )
    except FilterConfigurationError as e:
        logger.error(str(e))
        return 1

    assembly = ReportAssembly(data_store['tables'], data_store['summary'])

    if args.export:
        export_static_report(assembly, args.export, initial_state, title=args.title)
        return 0

    dashboard = DashboardApp(assembly, initial_state=initial_state, title=args.title)
    dashboard.run(host=args.host, port=args.port, debug=args.debug)

    return 0

if __name__ == "__main__":
    exit(main())
