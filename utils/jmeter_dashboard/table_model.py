"""
Table datasets for the JMeter Report Dashboard

A TableModel is the immutable form of one table literal from a JMeter
report: column titles, an optional pinned aggregate row and the item rows.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableRow:
    values: Tuple[Any, ...]
    is_controller: bool = False

    @classmethod
    def from_dict(cls, data: Dict) -> "TableRow":
        if not isinstance(data, dict):
            raise ValueError(f"Row must be an object, got {type(data).__name__}")
        values = data.get('data')
        if values is None:
            values = []
        if not isinstance(values, (list, tuple)):
            raise ValueError(f"Row data must be a list, got {type(values).__name__}")
        return cls(values=tuple(values), is_controller=bool(data.get('isController', False)))

    def to_dict(self) -> Dict:
        return {'data': list(self.values), 'isController': self.is_controller}

    def __len__(self):
        return len(self.values)


@dataclass(frozen=True)
class TableModel:
    titles: Tuple[str, ...]
    items: Tuple[TableRow, ...] = ()
    overall: Optional[TableRow] = None
    supports_controllers_discrimination: bool = False

    @classmethod
    def from_dict(cls, data: Dict) -> "TableModel":
        """Build a model from the JSON literal JMeter writes into its report."""
        if not isinstance(data, dict):
            raise ValueError(f"Table data must be an object, got {type(data).__name__}")
        titles = data.get('titles')
        if not isinstance(titles, list) or not titles:
            raise ValueError("Table data requires a non-empty 'titles' list")
        items = data.get('items', [])
        if not isinstance(items, list):
            raise ValueError("Table 'items' must be a list")
        overall = data.get('overall')
        return cls(
            titles=tuple(str(title) for title in titles),
            items=tuple(TableRow.from_dict(item) for item in items),
            overall=TableRow.from_dict(overall) if overall else None,
            supports_controllers_discrimination=bool(data.get('supportsControllersDiscrimination', False)),
        )

    def to_dict(self) -> Dict:
        data = {
            'supportsControllersDiscrimination': self.supports_controllers_discrimination,
            'titles': list(self.titles),
            'items': [item.to_dict() for item in self.items],
        }
        if self.overall is not None:
            data['overall'] = self.overall.to_dict()
        return data

    @property
    def width(self) -> int:
        return len(self.titles)


@dataclass(frozen=True)
class HeaderCell:
    label: str
    colspan: int = 1
    sortable: bool = True

    def to_dict(self) -> Dict:
        return {'label': self.label, 'colspan': self.colspan, 'sortable': self.sortable}

    @classmethod
    def from_dict(cls, data: Dict) -> "HeaderCell":
        return cls(label=data['label'], colspan=data.get('colspan', 1), sortable=data.get('sortable', True))


class HeaderDecorator:
    """Adds header rows above the per-column title row."""

    def decorate(self, titles: Sequence[str]) -> List[List[HeaderCell]]:
        raise NotImplementedError


@dataclass(frozen=True)
class HeaderGroups(HeaderDecorator):
    """One spanning, non-sortable super-header row grouping adjacent columns."""

    groups: Tuple[Tuple[str, int], ...] = field(default_factory=tuple)

    def decorate(self, titles: Sequence[str]) -> List[List[HeaderCell]]:
        span = sum(colspan for _, colspan in self.groups)
        if span != len(titles):
            logger.warning(f"Header groups span {span} columns but the table has {len(titles)}; skipping groups")
            return []
        return [[HeaderCell(label, colspan, sortable=False) for label, colspan in self.groups]]

    def group_of(self, column_index: int) -> Optional[str]:
        start = 0
        for label, colspan in self.groups:
            if start <= column_index < start + colspan:
                return label
            start += colspan
        return None
