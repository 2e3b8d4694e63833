"""
Static HTML export of a rendered report
"""

import html
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from .charts import build_summary_figure
from .filters import FilterState
from .report_assembly import ReportAssembly
from .table_renderer import RenderedTable

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ background: #0d1117; color: #f0f6fc; font-family: Inter, sans-serif; margin: 2rem; }}
table.report-table {{ border-collapse: collapse; margin-bottom: 2rem; font-size: 12px; }}
table.report-table th, table.report-table td {{ border: 1px solid #30363d; padding: 6px 8px; text-align: center; }}
table.report-table th {{ background: #161b22; }}
table.report-table tbody.pinned td {{ font-weight: bold; }}
</style>
</head>
<body>
<h1>{title}</h1>
<p class="filters">{filters}</p>
{chart}
{tables}
</body>
</html>
"""


def rendered_table_frame(rendered: RenderedTable) -> pd.DataFrame:
    """DataFrame of the item rows' display strings, in their current order."""
    if len(rendered.header_rows) > 1:
        groups = []
        for cell in rendered.header_rows[0]:
            groups.extend([cell.label] * cell.colspan)
        columns = pd.MultiIndex.from_arrays([groups, rendered.titles])
    else:
        columns = pd.Index(rendered.titles)

    return pd.DataFrame([list(row.cells) for row in rendered.rows], columns=columns)


def pinned_body_html(rendered: RenderedTable) -> str:
    """The aggregate row as its own <tbody>, placed ahead of the item rows."""
    if rendered.pinned is None:
        return ""
    cells = "".join(f"<td>{html.escape(cell)}</td>" for cell in rendered.pinned.cells)
    return f'<tbody class="pinned">\n    <tr>{cells}</tr>\n  </tbody>\n  '


def render_table_html(rendered: RenderedTable, title: str) -> str:
    frame = rendered_table_frame(rendered)
    table_html = frame.to_html(index=False, classes='report-table', table_id=rendered.table_id, border=0)
    if rendered.pinned:
        table_html = table_html.replace('<tbody>', pinned_body_html(rendered) + '<tbody>', 1)
    return f"<h2>{html.escape(title)}</h2>\n{table_html}"


def export_static_report(assembly: ReportAssembly, output_path, filter_state: Optional[FilterState] = None,
                         title: str = "JMeter Report") -> Path:
    """Write the report as a single HTML page and return its path."""
    filter_state = filter_state or FilterState()
    rendered = assembly.render_all(filter_state)

    chart = build_summary_figure(assembly, dark=False).to_html(full_html=False, include_plotlyjs='cdn')
    tables = "\n".join(render_table_html(rendered[table_id], assembly.title(table_id)) for table_id in rendered)
    filters = html.escape(
        f"Controllers only: {filter_state.show_controllers_only} | "
        f"Series filter: {filter_state.series_filter or '(none)'} | "
        f"Filter only sample series: {filter_state.filters_only_sample_series}"
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(PAGE_TEMPLATE.format(title=html.escape(title), filters=filters, chart=chart, tables=tables),
                           encoding='utf-8')
    logger.info(f"Static report written to {output_path}")
    return output_path
