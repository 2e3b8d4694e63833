"""
Data processing functionality for the JMeter Report Dashboard

Handles discovery and loading of report data: JSON bundles and the
dashboard.js files JMeter writes into its HTML report.
"""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Tuple

from .table_model import TableModel

logger = logging.getLogger(__name__)

CREATE_TABLE_PATTERN = re.compile(r'createTable\(\s*\$\(\s*["\']#(?P<table_id>[\w-]+)["\']\s*\)\s*,\s*')
SUMMARY_PATTERN = re.compile(r'var\s+data\s*=\s*(?=\{\s*"OkPercent")')

class ReportDataProcessor:
    """Handles discovery, loading, and merging of report data files."""

    def __init__(self, data_path: Path):
        self.data_path = Path(data_path)
        self.data_store = {
            'tables': {},
            'summary': {},
            'sources': []
        }

    def discover_files(self) -> Dict[str, List[Path]]:
        """Discover and categorize all report data files."""
        files = {
            'report_json': [],
            'dashboard_js': [],
            'unknown': []
        }

        if self.data_path.is_file():
            candidates = [self.data_path]
        else:
            candidates = sorted(self.data_path.rglob('*.json')) + sorted(self.data_path.rglob('dashboard.js'))

        for file_path in candidates:
            try:
                if file_path.suffix.lower() == '.js':
                    files['dashboard_js'].append(file_path)
                elif self._detect_json_type(file_path) == 'report_json':
                    files['report_json'].append(file_path)
                else:
                    files['unknown'].append(file_path)
            except Exception as e:
                logger.warning(f"Could not process {file_path}: {e}")
                files['unknown'].append(file_path)

        return files

    def _detect_json_type(self, file_path: Path) -> str:
        """Detect JSON file type based on structure."""
        try:
            with open(file_path, 'r') as f:
                data = json.load(f)

            # Report bundle: a "tables" object whose values carry "titles"
            if isinstance(data, dict) and isinstance(data.get('tables'), dict):
                if all(isinstance(t, dict) and 'titles' in t for t in data['tables'].values()):
                    return "report_json"

            return "unknown"
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            return "unknown"

    def _process_report_json_file(self, file_path: Path) -> Tuple[Dict[str, TableModel], Dict]:
        """Process a JSON bundle and return its tables and summary."""
        try:
            with open(file_path, 'r') as f:
                data = json.load(f)

            tables = {}
            for table_id, table_data in data.get('tables', {}).items():
                try:
                    tables[table_id] = TableModel.from_dict(table_data)
                except ValueError as e:
                    logger.warning(f"Skipping table {table_id} in {file_path}: {e}")

            return tables, data.get('summary') or {}

        except Exception as e:
            logger.error(f"Error processing report file {file_path}: {e}")
            return {}, {}

    def _process_dashboard_js_file(self, file_path: Path) -> Tuple[Dict[str, TableModel], Dict]:
        """Extract the table and summary literals of a JMeter dashboard.js."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                source = f.read()
            return parse_dashboard_js(source, str(file_path))
        except Exception as e:
            logger.error(f"Error processing dashboard file {file_path}: {e}")
            return {}, {}

    def process_all_data(self) -> Dict:
        """Discover and load all report data files."""
        logger.info(f"Discovering report data in {self.data_path}")
        files = self.discover_files()

        logger.info(f"Found {len(files['report_json'])} report JSON and "
                   f"{len(files['dashboard_js'])} dashboard.js files")

        jobs = ([(self._process_report_json_file, path) for path in files['report_json']]
                + [(self._process_dashboard_js_file, path) for path in files['dashboard_js']])
        if not jobs:
            return self.data_store

        # Files are parsed concurrently, merged in discovery order
        results = {}
        max_workers = min(len(jobs), 4)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(func, path): index
                for index, (func, path) in enumerate(jobs)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    logger.error(f"Thread failed processing {jobs[index][1]}: {e}")

        for index in sorted(results):
            tables, summary = results[index]
            path = jobs[index][1]
            if not tables and not summary:
                continue
            for table_id in tables:
                if table_id in self.data_store['tables']:
                    logger.warning(f"Table {table_id} from {path} replaces an earlier definition")
            self.data_store['tables'].update(tables)
            self.data_store['summary'].update(summary)
            self.data_store['sources'].append(str(path))
            logger.debug(f"Loaded {len(tables)} tables from {path}")

        logger.info(f"Loaded {len(self.data_store['tables'])} tables from {len(self.data_store['sources'])} files")
        return self.data_store

def parse_dashboard_js(source: str, origin: str = "<string>") -> Tuple[Dict[str, TableModel], Dict]:
    """Read the JSON literals passed to createTable and the pass/fail summary."""
    decoder = json.JSONDecoder()
    tables = {}
    for match in CREATE_TABLE_PATTERN.finditer(source):
        table_id = match.group('table_id')
        try:
            data, _ = decoder.raw_decode(source, match.end())
            tables[table_id] = TableModel.from_dict(data)
        except ValueError as e:
            logger.warning(f"Skipping table {table_id} in {origin}: {e}")

    summary = {}
    summary_match = SUMMARY_PATTERN.search(source)
    if summary_match:
        try:
            summary, _ = decoder.raw_decode(source, summary_match.end())
        except ValueError as e:
            logger.warning(f"Could not read pass/fail summary in {origin}: {e}")

    return tables, summary
