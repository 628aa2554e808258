"""CSV trade upload ingestion"""
import csv
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Optional, TextIO, Union

from trade_ledger.exceptions import (
    InvalidUploadError,
    NoValidTradesError,
    TradeStorageError,
    TradeStreamError,
)
from trade_ledger.models.results import IngestionSummary
from trade_ledger.models.trade import RejectedRow, TradeRecord
from trade_ledger.parser import parse_row
from trade_ledger.services.storage import TradeStore

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ('.csv',)

# Errors that mean the file itself is unreadable, as opposed to a bad row
STREAM_ERRORS = (csv.Error, UnicodeDecodeError, OSError)

@dataclass
class IngestionTally:
    """Everything one ingestion pass accumulates"""
    accepted: List[TradeRecord] = field(default_factory=list)
    rejected: List[RejectedRow] = field(default_factory=list)
    stored_count: int = 0
    failed_count: int = 0

    def to_summary(self) -> IngestionSummary:
        return IngestionSummary(
            valid_count=len(self.accepted),
            invalid_count=len(self.rejected),
            failed_count=self.failed_count,
            stored_count=self.stored_count
        )

def read_csv_rows(handle: TextIO) -> Iterator[dict]:
    """Yield CSV rows as dicts, with surrounding whitespace stripped from the header names"""
    reader = csv.DictReader(handle)
    if reader.fieldnames is None:
        return
    reader.fieldnames = [name.strip() for name in reader.fieldnames]
    yield from reader

class IngestionService:
    """Validates uploaded trade rows and upserts the valid ones"""

    def __init__(self, store: TradeStore):
        self.store = store

    def ingest_rows(self, rows: Iterable[Mapping[str, Optional[str]]]) -> IngestionSummary:
        """
        Run one ingestion pass over already column-split rows.

        Every row is validated before the next one is read. Upserts happen
        after the whole stream is read, one at a time and in stream order,
        so a later duplicate of (utc_time, market) overwrites an earlier one.

        Returns:
            IngestionSummary with valid/invalid/failed counts

        Raises:
            TradeStreamError: If reading the stream fails; nothing from this pass is stored
            NoValidTradesError: If no row passed validation; storage is not touched
        """
        tally = self._scan(rows, IngestionTally())

        if not tally.accepted:
            logger.error(f"No valid trade data found ({len(tally.rejected)} invalid rows)")
            raise NoValidTradesError(len(tally.rejected))

        tally = self._persist(tally)
        summary = tally.to_summary()

        if summary.failed_count:
            logger.warning(f"{summary.failed_count} of {summary.valid_count} valid trades could not be stored")
        logger.info(summary.message)
        return summary

    def ingest_file(self, path: Union[str, Path], remove_after: bool = False) -> IngestionSummary:
        """
        Ingest an uploaded CSV file.

        The file handle is closed on every exit path. With remove_after the
        file itself is deleted afterwards too, whatever the outcome.

        Raises:
            InvalidUploadError: If the file is not a .csv
            TradeStreamError: If the file cannot be opened, read or decoded
            NoValidTradesError: If no row passed validation
        """
        path = Path(path)
        try:
            if path.suffix.lower() not in ALLOWED_EXTENSIONS:
                raise InvalidUploadError("Invalid file type. Please upload a CSV file.")

            logger.info(f"Ingesting trades from {path.name}")
            try:
                with open(path, newline='', encoding='utf-8-sig') as handle:
                    return self.ingest_rows(read_csv_rows(handle))
            except OSError as e:
                logger.error(f"Error reading the file: {e}")
                raise TradeStreamError(f"Error reading the file: {e}") from e
        finally:
            if remove_after:
                self._remove(path)

    def _scan(self, rows: Iterable[Mapping[str, Optional[str]]], tally: IngestionTally) -> IngestionTally:
        try:
            for row_number, row in enumerate(rows, start=1):
                result = parse_row(row, row_number)
                if isinstance(result, RejectedRow):
                    logger.warning(f"Error processing row {row_number}: {result.row}, Error: {result.reason}")
                    tally.rejected.append(result)
                else:
                    tally.accepted.append(result)
        except STREAM_ERRORS as e:
            logger.error(f"Error reading the file: {e}")
            raise TradeStreamError(f"Error reading the file: {e}") from e
        return tally

    def _persist(self, tally: IngestionTally) -> IngestionTally:
        # Sequential on purpose: last write in stream order must win for duplicate keys
        for record in tally.accepted:
            try:
                self.store.upsert(record)
                tally.stored_count += 1
            except TradeStorageError as e:
                tally.failed_count += 1
                logger.error(f"Error upserting trade: {record}, Error: {e}")
        return tally

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Could not remove uploaded file {path}: {e}")
