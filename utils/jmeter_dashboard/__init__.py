"""
JMeter Report Dashboard

Interactive and static rendering of JMeter report tables.
"""

from .filters import FilterConfigurationError, FilterController, FilterState, row_included
from .formatters import ColumnFormatter, Duration, FixedDecimal, Identity, Percentage, format_duration
from .report_assembly import REPORT_TABLES, ReportAssembly, SummaryEntry
from .table_model import HeaderDecorator, HeaderGroups, TableModel, TableRow
from .table_renderer import RenderedTable, TableRenderer

__version__ = "0.1.0"
