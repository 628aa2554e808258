"""Command line entry point for trade ingestion and balance queries"""
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from trade_ledger.config import settings
from trade_ledger.db import Database, db
from trade_ledger.exceptions import BalanceQueryError, TradeLedgerError
from trade_ledger.services.balance import BalanceService
from trade_ledger.services.ingestion import ALLOWED_EXTENSIONS, IngestionService
from trade_ledger.utils.json_encoder import DateTimeEncoder

logger = logging.getLogger(__name__)

def find_upload(input_dir: str) -> Path:
    """Pick the first CSV file in the upload directory"""
    directory = Path(input_dir)
    if directory.is_dir():
        for path in sorted(directory.iterdir()):
            if path.suffix.lower() in ALLOWED_EXTENSIONS:
                return path
    raise FileNotFoundError(f"No file uploaded: no CSV found in {input_dir}")

def write_result(result: Dict[str, Any]) -> None:
    """Print the result and save it to OUTPUT_DIR/results.json when that directory exists"""
    payload = json.dumps(result, indent=2, cls=DateTimeEncoder)
    print(payload)

    if os.path.isdir(settings.OUTPUT_DIR):
        output_path = os.path.join(settings.OUTPUT_DIR, "results.json")
        with open(output_path, 'w') as f:
            f.write(payload)

def ingest(database: Database, path: Optional[str], remove_after: bool) -> Dict[str, Any]:
    upload = Path(path) if path else find_upload(settings.INPUT_DIR)
    with database.store() as store:
        summary = IngestionService(store).ingest_file(upload, remove_after=remove_after)
    return summary.model_dump()

def balance(database: Database, timestamp: str) -> Dict[str, Any]:
    with database.store() as store:
        response = BalanceService(store).get_balances(timestamp)
    return response.model_dump(exclude_none=True)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='trade_ledger', description='Trade CSV ingestion and balance queries')
    subparsers = parser.add_subparsers(dest='command', required=True)

    ingest_parser = subparsers.add_parser('ingest', help='Validate and store trades from a CSV file')
    ingest_parser.add_argument('path', nargs='?', help='CSV file (defaults to the first CSV in INPUT_DIR)')
    ingest_parser.add_argument('--remove', action='store_true', default=settings.REMOVE_AFTER_INGEST,
                               help='Delete the file once ingested')

    balance_parser = subparsers.add_parser('balance', help='Net base-coin balances before a timestamp')
    balance_parser.add_argument('timestamp', nargs='?', help='Exclusive cutoff, ISO-8601 or epoch milliseconds')
    return parser

def run(argv: Optional[List[str]] = None, database: Optional[Database] = None) -> int:
    """Run one command and return the process exit code"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL, format='%(message)s')
    database = database or db

    try:
        if not database.initialized:
            database.init()

        if args.command == 'ingest':
            result = ingest(database, args.path, args.remove)
        else:
            timestamp = int(args.timestamp) if args.timestamp and args.timestamp.isdigit() else args.timestamp
            result = balance(database, timestamp)

        write_result(result)
        return 0

    except BalanceQueryError as e:
        write_result({'error': str(e)})
        return 1
    except (TradeLedgerError, FileNotFoundError) as e:
        logger.error(f"Error during {args.command}: {e}")
        write_result({'error': str(e)})
        return 1

def main() -> None:
    sys.exit(run())

if __name__ == "__main__":
    main()
