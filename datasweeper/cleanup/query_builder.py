"""Comparison query construction.

The comparison query counts, for every source file touched in a partition, how
many of its rows have no counterpart in the target table. Both SQL dialects we
run against (Athena/Trino and BigQuery) are described by a SqlDialect so the
query shape stays in one place.
"""

from dataclasses import dataclass

from datasweeper.objects.partition_key import PartitionKey
from datasweeper.security import validate_sql_identifier


@dataclass(frozen=True)
class SqlDialect:
    """SQL differences between query engines.

    Attributes:
        name: Dialect name used in logs
        file_path_column: Pseudo-column holding each row's source object URI
        quote_char: Identifier quote character
        qualify_as_one: Quote ``database.table`` as a single identifier
        string_partitions: Partition columns are strings ('01') rather than integers
    """

    name: str
    file_path_column: str
    quote_char: str
    qualify_as_one: bool
    string_partitions: bool

    def quote(self, identifier: str) -> str:
        return f"{self.quote_char}{validate_sql_identifier(identifier)}{self.quote_char}"

    def table_ref(self, database: str, table: str) -> str:
        validate_sql_identifier(database)
        validate_sql_identifier(table)
        if self.qualify_as_one:
            return f"{self.quote_char}{database}.{table}{self.quote_char}"
        return f"{self.quote(database)}.{self.quote(table)}"

    def partition_filter(self, partition: PartitionKey) -> str:
        parts = (("year", partition.year), ("month", partition.month), ("day", partition.day))
        if self.string_partitions:
            return " AND ".join(f"{column} = '{value}'" for column, value in parts)
        return " AND ".join(f"CAST({column} AS INT64) = {int(value)}" for column, value in parts)


ATHENA_DIALECT = SqlDialect(
    name="athena",
    file_path_column='"$path"',
    quote_char='"',
    qualify_as_one=False,
    string_partitions=True,
)

BIGQUERY_DIALECT = SqlDialect(
    name="bigquery",
    file_path_column="_FILE_NAME",
    quote_char="`",
    qualify_as_one=True,
    string_partitions=False,
)


def build_comparison_query(
    dialect: SqlDialect,
    database: str,
    source_table: str,
    target_table: str,
    partition: PartitionKey,
    row_id_column: str = "request_id",
) -> str:
    """Build the per-file source/target row-count comparison for one partition.

    Source rows are left-joined to target rows on (partition date, row id) and
    grouped by (partition date, source file path). Each output row is one file
    with ``diff = count(source ids) - count(target ids)``.

    Args:
        dialect: SQL dialect of the engine that will run the query
        database: Database/dataset holding both tables
        source_table: Table over the raw source files
        target_table: Table over the converted files
        partition: Partition to compare
        row_id_column: Column identifying one logical record in both tables

    Returns:
        SQL text with columns ``dt``, ``path``, ``diff``

    Raises:
        SecurityError: If any identifier is unsafe to interpolate
    """
    source_ref = dialect.table_ref(database, source_table)
    target_ref = dialect.table_ref(database, target_table)
    row_id = dialect.quote(row_id_column)
    partition_filter = dialect.partition_filter(partition)
    partition_date = partition.partition_date

    return f"""
-- Source file statistics on {partition_date}
WITH source_rows AS (
  SELECT {dialect.file_path_column} AS path, '{partition_date}' AS dt, {row_id} AS row_id
  FROM {source_ref}
  WHERE {partition_filter}
), target_rows AS (
  SELECT '{partition_date}' AS dt, {row_id} AS row_id
  FROM {target_ref}
  WHERE {partition_filter}
), joined_rows AS (
  SELECT source_rows.path, source_rows.dt, source_rows.row_id AS source_id, target_rows.row_id AS target_id
  FROM source_rows LEFT JOIN target_rows
  ON source_rows.dt = target_rows.dt AND source_rows.row_id = target_rows.row_id
)
SELECT dt, path, COUNT(source_id) - COUNT(target_id) AS diff
FROM joined_rows
GROUP BY 1, 2
""".strip()
