"""
Table rendering for the JMeter Report Dashboard

Turns a TableModel into display rows: header rows (optionally decorated
with grouped super-headers), the pinned aggregate row, and the filtered
item rows, all formatted through the table's ColumnFormatter.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .filters import FilterConfigurationError, FilterState, compile_series_filter, row_included
from .formatters import ColumnFormatter
from .sorting import SortSpec, normalize_sort_spec, sort_rows
from .table_model import HeaderCell, HeaderDecorator, TableModel, TableRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedRow:
    """Display strings plus the raw values they were formatted from."""

    cells: Tuple[str, ...]
    sort_keys: Tuple[Any, ...]
    is_controller: bool = False

    def to_dict(self) -> Dict:
        return {'cells': list(self.cells), 'sort_keys': list(self.sort_keys), 'is_controller': self.is_controller}

    @classmethod
    def from_dict(cls, data: Dict) -> "RenderedRow":
        return cls(
            cells=tuple(data['cells']),
            sort_keys=tuple(data.get('sort_keys', data['cells'])),
            is_controller=data.get('is_controller', False),
        )


@dataclass(frozen=True)
class RenderedTable:
    table_id: str
    header_rows: Tuple[Tuple[HeaderCell, ...], ...]
    rows: Tuple[RenderedRow, ...]
    pinned: Optional[RenderedRow] = None
    sort_spec: SortSpec = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def titles(self) -> List[str]:
        return [cell.label for cell in self.header_rows[-1]] if self.header_rows else []

    @property
    def width(self) -> int:
        return len(self.titles)

    def sorted(self, sort_spec: Optional[SortSpec] = None) -> "RenderedTable":
        """Reorder the item rows; the pinned row is never part of the ordering."""
        spec = self.sort_spec if sort_spec is None else normalize_sort_spec(sort_spec, self.width)
        return RenderedTable(
            table_id=self.table_id,
            header_rows=self.header_rows,
            rows=tuple(sort_rows(self.rows, spec)),
            pinned=self.pinned,
            sort_spec=spec,
            skipped_rows=self.skipped_rows,
        )

    def to_dict(self) -> Dict:
        return {
            'table_id': self.table_id,
            'header_rows': [[cell.to_dict() for cell in row] for row in self.header_rows],
            'rows': [row.to_dict() for row in self.rows],
            'pinned': self.pinned.to_dict() if self.pinned else None,
            'sort_spec': [list(entry) for entry in self.sort_spec],
            'skipped_rows': self.skipped_rows,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "RenderedTable":
        return cls(
            table_id=data['table_id'],
            header_rows=tuple(tuple(HeaderCell.from_dict(cell) for cell in row) for row in data['header_rows']),
            rows=tuple(RenderedRow.from_dict(row) for row in data['rows']),
            pinned=RenderedRow.from_dict(data['pinned']) if data.get('pinned') else None,
            sort_spec=[tuple(entry) for entry in data.get('sort_spec', [])],
            skipped_rows=data.get('skipped_rows', 0),
        )


class TableRenderer:
    """Renders one report table against a FilterState."""

    def __init__(self, table_id: str, model: TableModel, formatter: Optional[ColumnFormatter] = None,
                 sort_spec: Sequence = ((0, 'asc'),), series_index: Optional[int] = None,
                 header_decorator: Optional[HeaderDecorator] = None):
        self.table_id = table_id
        self.model = model
        self.formatter = formatter or ColumnFormatter.identity(model.width)
        self.formatter.check_width(model.titles)
        self.sort_spec = normalize_sort_spec(sort_spec, model.width)
        self.series_index = series_index
        self.header_decorator = header_decorator

    @property
    def supports_controllers_discrimination(self) -> bool:
        return self.model.supports_controllers_discrimination

    def build_header(self) -> Tuple[Tuple[HeaderCell, ...], ...]:
        header_rows = []
        if self.header_decorator is not None:
            header_rows.extend(tuple(row) for row in self.header_decorator.decorate(self.model.titles))
        header_rows.append(tuple(HeaderCell(title) for title in self.model.titles))
        return tuple(header_rows)

    def _render_row(self, row: TableRow) -> RenderedRow:
        return RenderedRow(
            cells=tuple(self.formatter.format_row(row.values)),
            sort_keys=row.values,
            is_controller=row.is_controller,
        )

    def _well_formed(self, row: TableRow, kind: str) -> bool:
        if len(row) == 0:
            logger.debug(f"{self.table_id}: skipping empty {kind} row")
            return False
        if len(row) != self.model.width:
            logger.warning(
                f"{self.table_id}: skipping {kind} row with {len(row)} values "
                f"(expected {self.model.width}): {list(row.values)!r}"
            )
            return False
        return True

    def render(self, filter_state: Optional[FilterState] = None) -> RenderedTable:
        """Render header, pinned row and filtered item rows, then apply the initial sort.

        Raises FilterConfigurationError when the series filter is not a valid regex.
        """
        filter_state = filter_state or FilterState()
        pattern, error = compile_series_filter(filter_state.series_filter)
        if error:
            raise FilterConfigurationError(filter_state.series_filter, error)

        pinned = None
        overall = self.model.overall
        if overall is not None and self._well_formed(overall, 'overall'):
            pinned = self._render_row(overall)

        rows = []
        skipped = 0
        for item in self.model.items:
            if not row_included(item.values, item.is_controller, self.supports_controllers_discrimination,
                                filter_state, self.series_index, pattern):
                continue
            if not self._well_formed(item, 'item'):
                skipped += 1
                continue
            rows.append(self._render_row(item))

        logger.debug(f"{self.table_id}: rendered {len(rows)} of {len(self.model.items)} rows")
        return RenderedTable(
            table_id=self.table_id,
            header_rows=self.build_header(),
            rows=tuple(rows),
            pinned=pinned,
            sort_spec=self.sort_spec,
            skipped_rows=skipped,
        ).sorted()
