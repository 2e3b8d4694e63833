"""
Report assembly for the JMeter Report Dashboard

Declares how each JMeter report table is displayed (formatters, initial
sort, series column, grouped header) and renders them all against one
shared FilterState. Also prepares the pass/fail record for the summary
pie chart.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .filters import FilterState
from .formatters import ColumnFormatter, Duration, FixedDecimal, Percentage
from .table_model import HeaderDecorator, HeaderGroups, TableModel
from .table_renderer import RenderedTable, TableRenderer

logger = logging.getLogger(__name__)

FAIL_COLOR = "#FF6347"
PASS_COLOR = "#9ACD32"


@dataclass(frozen=True)
class ReportTableSpec:
    """Display configuration of one report table."""

    table_id: str
    title: str
    format_overrides: Tuple[Tuple[int, object], ...] = ()
    sort_spec: Tuple[Tuple[int, int], ...] = ((0, 0),)
    series_index: Optional[int] = None
    header_decorator: Optional[HeaderDecorator] = None

    def formatter(self, width: int) -> ColumnFormatter:
        return ColumnFormatter.from_overrides(width, dict(self.format_overrides))


STATISTICS_HEADER = HeaderGroups(groups=(
    ("Requests", 1),
    ("Executions", 3),
    ("Response Times (ms)", 7),
    ("Throughput", 1),
    ("Network (KB/sec)", 2),
))

APDEX_TABLE = ReportTableSpec(
    table_id="apdexTable",
    title="APDEX (Application Performance Index)",
    format_overrides=((0, FixedDecimal(3)), (1, Duration()), (2, Duration())),
    sort_spec=((0, 0),),
    series_index=3,
)

STATISTICS_TABLE = ReportTableSpec(
    table_id="statisticsTable",
    title="Statistics",
    format_overrides=((3, Percentage()),) + tuple((index, FixedDecimal(2)) for index in (4, 7, 8, 9, 10, 11, 12, 13)),
    sort_spec=((0, 0),),
    series_index=0,
    header_decorator=STATISTICS_HEADER,
)

ERRORS_TABLE = ReportTableSpec(
    table_id="errorsTable",
    title="Errors",
    format_overrides=((2, Percentage()), (3, Percentage())),
    sort_spec=((1, 1),),
)

TOP5_ERRORS_TABLE = ReportTableSpec(
    table_id="top5ErrorsBySamplerTable",
    title="Top 5 Errors by sampler",
    sort_spec=((0, 0),),
    series_index=0,
)

REPORT_TABLES = (APDEX_TABLE, STATISTICS_TABLE, ERRORS_TABLE, TOP5_ERRORS_TABLE)


@dataclass(frozen=True)
class SummaryEntry:
    label: str
    value: float
    color: str


def format_summary_label(label: str, percent: float) -> str:
    """Pie slice label: series name over its percentage rounded to 2 decimals."""
    return f"{label}<br>{round(float(percent), 2)}%"


class ReportAssembly:
    """All tables of one report plus the pass/fail summary."""

    def __init__(self, tables: Dict[str, TableModel], summary: Optional[Dict] = None,
                 specs: Sequence[ReportTableSpec] = REPORT_TABLES):
        self.tables = tables
        self.summary = summary or {}
        self.specs: Dict[str, ReportTableSpec] = {}
        self.renderers: Dict[str, TableRenderer] = {}

        for spec in specs:
            model = tables.get(spec.table_id)
            if model is None:
                logger.info(f"No data for table {spec.table_id}; it will not be displayed")
                continue
            self.specs[spec.table_id] = spec
            self.renderers[spec.table_id] = TableRenderer(
                table_id=spec.table_id,
                model=model,
                formatter=spec.formatter(model.width),
                sort_spec=spec.sort_spec,
                series_index=spec.series_index,
                header_decorator=spec.header_decorator,
            )

        unknown = sorted(set(tables) - set(self.renderers))
        if unknown:
            logger.warning(f"Ignoring tables without a display configuration: {unknown}")

    @property
    def table_ids(self) -> List[str]:
        return list(self.renderers)

    def title(self, table_id: str) -> str:
        return self.specs[table_id].title

    def render(self, table_id: str, filter_state: Optional[FilterState] = None) -> RenderedTable:
        return self.renderers[table_id].render(filter_state)

    def render_all(self, filter_state: Optional[FilterState] = None) -> Dict[str, RenderedTable]:
        """Render every table against the same filter state."""
        return {table_id: renderer.render(filter_state) for table_id, renderer in self.renderers.items()}

    def affected_tables(self, old_state: FilterState, new_state: FilterState) -> List[str]:
        """Tables whose rendering may differ between two filter states."""
        if old_state == new_state:
            return []
        series_reaches_all = not (old_state.filters_only_sample_series and new_state.filters_only_sample_series)
        return [
            table_id for table_id, renderer in self.renderers.items()
            if renderer.supports_controllers_discrimination or series_reaches_all
        ]

    def pass_fail_percentages(self) -> Tuple[float, float]:
        """(pass %, fail %) from the report summary, else from the Statistics total row."""
        if 'OkPercent' in self.summary and 'KoPercent' in self.summary:
            try:
                return float(self.summary['OkPercent']), float(self.summary['KoPercent'])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring non-numeric pass/fail summary: {self.summary!r}")

        statistics = self.tables.get(STATISTICS_TABLE.table_id)
        if statistics is not None and statistics.overall is not None and len(statistics.overall) > 2:
            samples, failures = statistics.overall.values[1], statistics.overall.values[2]
            try:
                fail = float(failures) / float(samples) * 100 if float(samples) else 0.0
            except (TypeError, ValueError):
                logger.warning(f"Cannot derive pass/fail from statistics total row: {statistics.overall.values!r}")
                return 0.0, 0.0
            return 100.0 - fail, fail

        logger.warning("No pass/fail summary available")
        return 0.0, 0.0

    def summary_entries(self) -> List[SummaryEntry]:
        """The two-entry pass/fail dataset handed to the summary chart."""
        pass_percent, fail_percent = self.pass_fail_percentages()
        return [
            SummaryEntry(label="FAIL", value=fail_percent, color=FAIL_COLOR),
            SummaryEntry(label="PASS", value=pass_percent, color=PASS_COLOR),
        ]

    def summary_labels(self, label_formatter: Callable[[str, float], str] = format_summary_label) -> List[str]:
        entries = self.summary_entries()
        total = sum(entry.value for entry in entries)
        return [
            label_formatter(entry.label, entry.value * 100 / total if total else 0.0)
            for entry in entries
        ]
