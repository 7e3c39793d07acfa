# Row sources: query result sets, DataFrames and keyed record loaders.

from collections.abc import Callable, Generator, Iterator, Mapping
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Protocol

import polars as pl
from loguru import logger

from .errors import ReportQueryError
from .ordering import KeyKind, SpecKeyedRows

N_ROWS_FETCH = 1_000

################################################################################
# #region ResultSet


@dataclass(slots=True)
class SpecResultSet:
    """
    Column names plus a row iterator, released through :meth:`close`.

    Rows are tuples aligned with ``columns``. ``close`` is idempotent and is
    also called on leaving a ``with`` block.
    """

    columns: tuple[str, ...]
    rows: Iterator[tuple[Any, ...]]
    on_close: Callable[[], None] | None = None
    is_closed: bool = field(default=False, init=False)

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return self.rows

    def __enter__(self) -> "SpecResultSet":
        return self

    def __exit__(
        self, exc_type: type | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()

    def close(self) -> None:
        if self.is_closed:
            return
        self.is_closed = True
        if self.on_close is not None:
            self.on_close()


def _generate_cursor_rows(
    cursor: Any, size_fetch: int
) -> Generator[tuple[Any, ...], Any, None]:
    while True:
        try:
            l_batch = cursor.fetchmany(size_fetch)
        except Exception as exc:
            raise ReportQueryError(f"Fetching query rows failed: {exc}") from exc
        if not l_batch:
            return
        for _row in l_batch:
            yield tuple(_row)


def execute_query(
    connection: Any, query: str, *, size_fetch: int = N_ROWS_FETCH
) -> SpecResultSet:
    """
    Run ``query`` on a DB-API 2.0 connection and stream its rows.

    Args:
        connection: Any DB-API connection (``sqlite3``, ``pyodbc``, ...).
        query: Query text; it must return a result set.
        size_fetch: Rows per ``fetchmany`` call.

    Raises:
        ReportQueryError: The cursor could not be opened, the query failed,
            or it produced no result set. The cursor is closed in every case.

    Returns:
        SpecResultSet: Columns from ``cursor.description`` and a lazy row
        iterator; closing it closes the cursor.
    """
    try:
        cursor = connection.cursor()
    except Exception as exc:
        raise ReportQueryError(f"Opening a cursor failed: {exc}") from exc

    try:
        cursor.execute(query)
        if cursor.description is None:
            raise ReportQueryError(f"Query returned no result set: {query!r}")
        tup_columns = tuple(str(_desc[0]) for _desc in cursor.description)
    except ReportQueryError:
        cursor.close()
        raise
    except Exception as exc:
        cursor.close()
        raise ReportQueryError(f"Query failed: {exc}") from exc

    return SpecResultSet(
        columns=tup_columns,
        rows=_generate_cursor_rows(cursor, size_fetch),
        on_close=cursor.close,
    )


# #endregion
################################################################################
# #region DataFrameSource


def convert_to_polars(df: Any) -> pl.DataFrame:
    return df if isinstance(df, pl.DataFrame) else pl.DataFrame(df)


def calculate_row_chunk_size(*, width_df: int) -> int:
    """
    Return a row chunk size for streaming a DataFrame of ``width_df`` columns.

    Wider frames use smaller chunks to bound the rows materialized at once.
    """
    if width_df >= 8_000:
        return 1_000
    if width_df >= 2_000:
        return 2_000
    return 10_000


def generate_row_chunks(
    df: pl.DataFrame, size_rows_chunk: int
) -> Generator[tuple[int, pl.DataFrame], Any, None]:
    if size_rows_chunk <= 0:
        raise ValueError(f"size_rows_chunk must be >= 1, got {size_rows_chunk}.")
    n_rows_total = df.height
    n_row_cursor = 0
    while n_row_cursor < n_rows_total:
        n_rows_per_chunk = min(size_rows_chunk, n_rows_total - n_row_cursor)
        yield n_row_cursor, df.slice(offset=n_row_cursor, length=n_rows_per_chunk)
        n_row_cursor += n_rows_per_chunk


def result_set_from_frame(
    df: Any, *, size_rows_chunk: int | None = None
) -> SpecResultSet:
    """Expose a DataFrame (or anything ``pl.DataFrame`` accepts) as a result set."""
    df_custom = convert_to_polars(df)
    n_size_chunk = (
        calculate_row_chunk_size(width_df=df_custom.width)
        if size_rows_chunk is None
        else size_rows_chunk
    )

    def _generate_rows() -> Generator[tuple[Any, ...], Any, None]:
        for _, _df_chunk in generate_row_chunks(df_custom, n_size_chunk):
            yield from _df_chunk.iter_rows()

    return SpecResultSet(columns=tuple(df_custom.columns), rows=_generate_rows())


# #endregion
################################################################################
# #region KeyedLoaders


class ReportData(Protocol):
    """
    Loader turning a result set into a keyed row collection.

    Rows should be structured records (dataclass instances or tuples) whose
    fields are tagged cells, in column order. The key type decides the row
    order of the sheet.
    """

    def load_rows(self, result_set: SpecResultSet) -> SpecKeyedRows | Mapping[Any, Any]: ...


@dataclass(slots=True)
class RecordLoader:
    """
    Generic :class:`ReportData`: one record per result row.

    ``record_factory`` receives the row values positionally. Without
    ``key_of`` rows are keyed by their 1-based position, which keeps the
    query order; with it the key is derived from each record.
    """

    record_factory: Callable[..., Any]
    key_of: Callable[[Any], Any] | None = None
    key_kind: KeyKind | None = None

    def load_rows(self, result_set: SpecResultSet) -> SpecKeyedRows:
        dict_rows: dict[Any, Any] = {}
        for _idx, _row in enumerate(result_set, start=1):
            record = self.record_factory(*_row)
            key = _idx if self.key_of is None else self.key_of(record)
            if key in dict_rows:
                logger.warning(f"Duplicate row key {key!r}: keeping the last row.")
            dict_rows[key] = record
        return SpecKeyedRows(dict_rows, key_kind=self.key_kind)


# #endregion
################################################################################
