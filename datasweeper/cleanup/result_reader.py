"""Delimited query result parsing."""

import csv
import io
from dataclasses import dataclass, field
from typing import Dict, List

from datasweeper.bucket.storage_provider import StorageProvider
from datasweeper.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ParsedResults:
    """Rows of a result file keyed by header name, plus the malformed row count."""

    rows: List[Dict[str, str]] = field(default_factory=list)
    skipped_rows: int = 0
    header: List[str] = field(default_factory=list)

    def extend(self, other: "ParsedResults") -> None:
        self.rows.extend(other.rows)
        self.skipped_rows += other.skipped_rows
        if not self.header:
            self.header = other.header


def parse_delimited_results(text: str) -> ParsedResults:
    """Parse comma-delimited result text into header-keyed rows.

    The first line is the header. Values may be wrapped in double quotes,
    which are stripped. Rows whose field count differs from the header are
    skipped and counted; blank lines are ignored.

    Example:
        >>> parsed = parse_delimited_results('"dt","path","diff"\\n"2024-01-02","s3://b/x","0"\\n')
        >>> parsed.rows
        [{'dt': '2024-01-02', 'path': 's3://b/x', 'diff': '0'}]
    """
    reader = csv.reader(io.StringIO(text))
    parsed = ParsedResults()

    try:
        parsed.header = next(reader)
    except StopIteration:
        return parsed

    for row in reader:
        if not row:
            continue
        if len(row) != len(parsed.header):
            parsed.skipped_rows += 1
            logger.debug(f"Skipping row with {len(row)} fields, expected {len(parsed.header)}: {row}")
            continue
        parsed.rows.append(dict(zip(parsed.header, row)))

    return parsed


def read_delimited_results(storage: StorageProvider, results_location: str) -> ParsedResults:
    """Fetch result object(s) at ``results_location`` and parse them.

    Sharded results (a prefix location) are parsed shard by shard, each with
    its own header line, and concatenated in key order.
    """
    results = ParsedResults()
    for text in storage.read_text_objects(results_location):
        results.extend(parse_delimited_results(text))

    logger.debug(f"Read {len(results.rows)} rows from {results_location}")
    return results
