import io
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import pandas as pd

from timeport.core.config import settings
from ..exceptions import ParseError

logger = logging.getLogger(__name__)


def decode_payload(data: Union[bytes, str], *, source: str = "CSV") -> str:
    """Return payload text, decoding UTF-8 bytes and dropping a leading BOM."""
    if isinstance(data, str):
        return data.lstrip("\ufeff")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{source} data is not valid UTF-8") from exc


def _read_csv(text: str, **kwargs):
    # Every value stays a string; empty cells become "" rather than NaN so
    # only structurally missing cells show up as NA (the C engine pads short
    # rows with "" instead).
    return pd.read_csv(
        io.StringIO(text),
        engine="python",
        sep=",",
        quotechar='"',
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        **kwargs,
    )


def read_csv_header(text: str) -> List[str]:
    """Parse only the header row."""
    if not text.strip():
        raise ParseError("CSV data is empty")
    try:
        frame = _read_csv(text, header=None, nrows=1)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ParseError("Invalid CSV data") from exc
    return [str(value) for value in frame.iloc[0].tolist()]


def validate_header(required_fields: Sequence[str], header: Sequence[str]) -> None:
    for required_field in required_fields:
        if required_field not in header:
            raise ParseError(f"Invalid CSV header, missing field: {required_field}")


def stream_csv_records(
    text: str,
    chunk_size: Optional[int] = None,
) -> Iterator[List[Dict[str, Any]]]:
    """
    Yield CSV records in chunks of at most ``chunk_size`` rows.

    Only one chunk is materialized at a time. The header row fixes the field
    count: a row with more fields than the header, or fewer, raises
    ParseError naming its line.

    Line numbers count records with the header as line 1, the same way the
    importers number rows. Blank lines and line breaks inside quoted cells
    are not counted.
    """
    chunk_size = chunk_size or settings.import_chunk_size
    header = read_csv_header(text)
    rows_seen = 0

    try:
        # header=None keeps pandas from inferring an index column when the
        # first data row is wider than the header.
        reader = _read_csv(text, header=None, chunksize=chunk_size)
        for chunk_number, chunk in enumerate(reader, start=1):
            if chunk_number == 1:
                chunk = chunk.iloc[1:]
            if chunk.empty:
                continue

            incomplete = chunk.isna().any(axis=1)
            if incomplete.any():
                label = incomplete[incomplete].index[0]
                present = int(chunk.loc[label].notna().sum())
                raise ParseError(f"Row has {present} fields, expected {len(header)}", int(label) + 1)

            records = [dict(zip(header, values)) for values in chunk.itertuples(index=False, name=None)]
            rows_seen += len(records)
            logger.debug(f"Parsed CSV chunk {chunk_number} ({len(records)} rows, {rows_seen} total)")
            yield records
    except pd.errors.ParserError as exc:
        raise ParseError(f"Invalid CSV data: {exc}") from exc

    logger.info(f"Streamed {rows_seen} CSV rows")
