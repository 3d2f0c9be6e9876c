"""Streaming reader for legacy dBase/FoxPro (.DBF) tables.

Wraps dbfread so callers see one failure type (DecodeError) and can pull rows
in bounded batches instead of loading a whole export into memory.
"""
import logging
import struct
from itertools import islice
from pathlib import Path
from typing import Any, Iterator, Union

from dbfread import DBF

from app.legacy.exceptions import DecodeError

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "latin1"

_DECODE_ERRORS = (OSError, ValueError, struct.error, UnicodeDecodeError, LookupError)


class DbfTable:
    """
    One legacy table file.

    Opening parses the header only. iter_rows() re-reads records from disk on
    every call, so the sequence can be restarted from the first row.
    """

    def __init__(self, path: Union[str, Path], encoding: str = DEFAULT_ENCODING):
        self.path = Path(path)
        self.encoding = encoding
        try:
            self._table = DBF(
                str(self.path),
                encoding=encoding,
                load=False,
                recfactory=dict,
                ignore_missing_memofile=True,
            )
        except _DECODE_ERRORS as e:
            raise DecodeError(self.path, str(e) or type(e).__name__) from e

    @property
    def field_names(self) -> list[str]:
        return list(self._table.field_names)

    @property
    def record_count(self) -> int:
        """Record count declared in the header (deleted records included)."""
        return self._table.header.numrecords

    def iter_rows(self) -> Iterator[dict[str, Any]]:
        """Yield each live record as {FIELD_NAME: value}."""
        try:
            for record in self._table:
                yield record
        except _DECODE_ERRORS as e:
            raise DecodeError(self.path, str(e) or type(e).__name__) from e

    def iter_batches(self, size: int = 500) -> Iterator[list[dict[str, Any]]]:
        if size < 1:
            raise ValueError("batch size must be at least 1")
        rows = self.iter_rows()
        while True:
            batch = list(islice(rows, size))
            if not batch:
                return
            yield batch

    def __repr__(self) -> str:
        return f"DbfTable({self.path.name!r}, records={self.record_count})"


def open_table(path: Union[str, Path], encoding: str = DEFAULT_ENCODING) -> DbfTable:
    logger.debug("Opening legacy table %s (encoding=%s)", path, encoding)
    return DbfTable(path, encoding=encoding)
