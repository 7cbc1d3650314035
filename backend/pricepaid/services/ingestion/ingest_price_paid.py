"""
HM Land Registry Price Paid Data Ingestion Script

Reads price paid CSV data (a local file or a download URL), geocodes each
postcode from the postcode table and bulk uploads the transactions into the
properties search index.

Usage:
    python -m pricepaid.services.ingestion.ingest_price_paid [--file PATH | --url URL] [--recreate]

Environment variables required:
    DATABASE_URL: PostgreSQL connection string (postcode table)
    ELASTICSEARCH_URL: Elasticsearch endpoint
"""

import argparse
import asyncio
import csv
import logging
import time
from collections.abc import Iterable, Iterator
from datetime import datetime
from itertools import islice
from uuid import UUID

import requests

from pricepaid.core.config import get_settings
from pricepaid.core.database import get_sync_sessionmaker
from pricepaid.core.elasticsearch import SearchClientRegistry
from pricepaid.models.property import (
    Address,
    BuildDetails,
    BuildType,
    ContractType,
    PropertyResult,
    PropertyType,
)
from pricepaid.services.geocoding import load_postcode_lookup
from pricepaid.services.search.backend import SearchBackend
from pricepaid.services.search.document_mapper import insert_properties
from pricepaid.services.search.elasticsearch_backend import ElasticsearchSearchBackend
from pricepaid.utils.normalization import normalize_postcode

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Price paid CSV codes
PROPERTY_TYPES = {
    "D": PropertyType.DETACHED,
    "S": PropertyType.SEMI_DETACHED,
    "T": PropertyType.TERRACED,
    "F": PropertyType.FLATS_MAISONETTES,
    "O": PropertyType.OTHER,
}
BUILD_TYPES = {"Y": BuildType.NEW_BUILD, "N": BuildType.OLD_STOCK}
CONTRACT_TYPES = {"F": ContractType.FREEHOLD, "L": ContractType.LEASEHOLD}
DELETED_RECORD = "D"
COLUMN_COUNT = 16


class InvalidRow(ValueError):
    """A price paid row that cannot be turned into a property record."""


def _optional(value: str) -> str | None:
    value = value.strip()
    return value or None


def parse_price_paid_row(row: list[str]) -> PropertyResult:
    """
    Parse one price paid CSV row.
    
    Raises:
        InvalidRow: wrong column count or an unparseable/unknown value
    """
    if len(row) < COLUMN_COUNT:
        raise InvalidRow(f"expected {COLUMN_COUNT} columns, got {len(row)}")
    (transaction_id, price, date_of_transfer, postcode, property_type, old_new,
     duration, paon, saon, street, locality, town, district, county) = row[:14]
    
    try:
        parsed_id = UUID(transaction_id.strip())
        parsed_price = int(price)
        parsed_date = datetime.strptime(date_of_transfer.strip()[:10], "%Y-%m-%d").date()
    except ValueError as e:
        raise InvalidRow(str(e)) from e
    
    if old_new not in BUILD_TYPES:
        raise InvalidRow(f"unknown old/new flag {old_new!r}")
    if duration not in CONTRACT_TYPES:
        raise InvalidRow(f"unknown duration {duration!r}")
    
    building = " ".join(part for part in (saon.strip(), paon.strip()) if part)
    return PropertyResult(
        transaction_id=parsed_id,
        price=parsed_price,
        date_of_transfer=parsed_date,
        build_details=BuildDetails(
            property_type=PROPERTY_TYPES.get(property_type),
            build=BUILD_TYPES[old_new],
            contract=CONTRACT_TYPES[duration],
        ),
        address=Address(
            building=building,
            street=_optional(street),
            locality=_optional(locality),
            town_city=town.strip(),
            district=district.strip(),
            county=county.strip(),
            postcode=normalize_postcode(postcode),
        ),
    )


def batched(items: Iterable, size: int) -> Iterator[list]:
    iterator = iter(items)
    while batch := list(islice(iterator, size)):
        yield batch


class PricePaidIngester:
    """Ingests price paid transactions into the search index."""
    
    def __init__(self, backend: SearchBackend, session_factory=None, batch_size: int | None = None):
        self.backend = backend
        self.session_factory = session_factory or get_sync_sessionmaker()
        self.batch_size = batch_size or get_settings().ingestion_batch_size
        self.stats = {
            "rows_read": 0,
            "rows_skipped": 0,
            "rows_deleted": 0,
            "documents_uploaded": 0,
            "batches": 0,
        }
    
    def parse_rows(self, rows: Iterable[list[str]]) -> Iterator[PropertyResult]:
        """Parse rows, logging and counting the ones that cannot be used."""
        for line_number, row in enumerate(rows, start=1):
            self.stats["rows_read"] += 1
            if len(row) >= COLUMN_COUNT and row[15] == DELETED_RECORD:
                self.stats["rows_deleted"] += 1
                continue
            try:
                yield parse_price_paid_row(row)
            except InvalidRow as e:
                logger.warning(f"Skipping row {line_number}: {e}")
                self.stats["rows_skipped"] += 1
    
    async def ingest_rows(self, rows: Iterable[list[str]]) -> dict[str, int]:
        """Geocode and upload parsed rows batch by batch."""
        for batch in batched(self.parse_rows(rows), self.batch_size):
            with self.session_factory() as session:
                lookup = load_postcode_lookup(session, (r.address.postcode for r in batch))
            uploaded = await insert_properties(self.backend, batch, lookup.get)
            self.stats["documents_uploaded"] += uploaded
            self.stats["batches"] += 1
            logger.info(f"Batch {self.stats['batches']}: {uploaded} documents")
        return self.stats
    
    async def run(self, file: str | None = None, url: str | None = None, recreate: bool = False) -> dict[str, int]:
        """Execute the full ingestion process."""
        start_time = time.time()
        if recreate:
            await self.backend.recreate_index()
        
        if file:
            logger.info(f"Reading price paid data from {file}")
            with open(file, newline="", encoding="utf-8") as f:
                await self.ingest_rows(csv.reader(f))
        else:
            url = url or get_settings().price_paid_url
            logger.info(f"Downloading price paid data from {url}")
            with requests.get(url, stream=True, timeout=300) as response:
                response.raise_for_status()
                response.encoding = response.encoding or "utf-8"
                await self.ingest_rows(csv.reader(response.iter_lines(decode_unicode=True)))
        
        duration = time.time() - start_time
        
        # Final summary
        logger.info("=" * 60)
        logger.info("INGESTION COMPLETE")
        logger.info(f"  Duration: {duration:.1f} seconds")
        logger.info(f"  Rows read: {self.stats['rows_read']}")
        logger.info(f"  Rows skipped: {self.stats['rows_skipped']}")
        logger.info(f"  Deletions ignored: {self.stats['rows_deleted']}")
        logger.info(f"  Documents uploaded: {self.stats['documents_uploaded']}")
        logger.info("=" * 60)
        
        return self.stats


async def run_ingestion(file: str | None, url: str | None, recreate: bool) -> dict[str, int]:
    registry = SearchClientRegistry()
    try:
        client = await registry.get(get_settings().search_connection)
        ingester = PricePaidIngester(ElasticsearchSearchBackend(client))
        return await ingester.run(file=file, url=url, recreate=recreate)
    finally:
        await registry.close()


def main():
    """Entry point for ingestion script."""
    parser = argparse.ArgumentParser(description="Load price paid data into the search index")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--file", help="Local price paid CSV file")
    source.add_argument("--url", help="Price paid CSV download URL (defaults to the monthly update)")
    parser.add_argument("--recreate", action="store_true", help="Drop and recreate the index first")
    args = parser.parse_args()
    return asyncio.run(run_ingestion(args.file, args.url, args.recreate))


if __name__ == "__main__":
    main()
