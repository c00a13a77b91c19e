#!/usr/bin/env python3
"""
Hike Log Sheet Collector

This script fetches the hike log from a published Google Sheet, normalizes it
into hike records grouped by trailhead, and writes map-ready artifacts.

The sheet is read through the visualization query endpoint, which returns the
table wrapped in a JavaScript callback. The collector unwraps and validates it,
then hands it to the processing pipeline. A sheet that cannot be fetched or
decoded yields an empty table so that the map still renders without hikes.

Outputs (in --output-dir):
- hikes.csv: one row per hike
- hike_locations.geojson: one point per trailhead, titled by its latest hike
- hike_tracks.geojson: latest GPX track per trailhead (with --with-tracks)

Usage:
    # Fetch the sheet configured by HIKES_SHEET_ID and write artifacts
    python scripts/collectors/sheet_collector.py

    # Use another sheet and resolve GPX tracks from a local directory
    TRACK_BASE_URL=./site python scripts/collectors/sheet_collector.py \\
        --sheet-id <id> --with-tracks
"""

import argparse
import asyncio
import json
import logging
import os
import re
import sys
from datetime import datetime

import geopandas as gpd
import requests
from dotenv import load_dotenv
from pydantic import ValidationError
from shapely.geometry import LineString

# Load .env before local imports that need env vars
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

# Add project root to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), "..", ".."))

from config.settings import config
from scripts.collectors.sheet_schemas import GvizResponse, RawTable
from scripts.collectors.track_resolver import TrackResolver
from scripts.processors.hike_pipeline import (
    HikeDataset,
    groups_to_geodataframe,
    process_table,
    records_to_dataframe,
)
from utils.logging import setup_sheet_collector_logging, setup_track_resolver_logging

logger = setup_sheet_collector_logging()

# google.visualization.Query.setResponse({...});
_RESPONSE_WRAPPER = re.compile(r"setResponse\((?P<body>.*)\)\s*;?\s*$", re.DOTALL)


def unwrap_gviz_response(text: str) -> dict | None:
    """
    Extract the JSON object from a visualization query response.

    Args:
        text: Response body, either bare JSON or wrapped in setResponse(...)

    Returns:
        Decoded response object, or None if the body cannot be decoded
    """
    match = _RESPONSE_WRAPPER.search(text)
    body = match.group("body") if match else text.strip()
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error(f"Could not decode sheet response: {e}")
        return None
    if not isinstance(payload, dict):
        logger.error("Sheet response is not a JSON object")
        return None
    return payload


def table_from_response(payload: dict | None) -> RawTable:
    """
    Turn a decoded response into a RawTable, reporting API-level errors.

    Args:
        payload: Decoded response object

    Returns:
        RawTable (without rows when the response is an error or malformed)
    """
    if payload is None:
        return RawTable()

    try:
        response = GvizResponse.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Invalid sheet response envelope: {e}")
        return RawTable()

    if response.status == "error":
        logger.error(f"Google Sheets API error: {response.errors}")
        return RawTable()

    if response.table is None or response.table.get("rows") is None:
        logger.error("Invalid sheet response structure: 'table' or 'rows' missing")
        return RawTable()

    return RawTable.from_payload(response.table)


class SheetCollector:
    """Fetch the hike log sheet and convert it into map artifacts."""

    def __init__(
        self,
        sheet_id: str | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize the collector.

        Args:
            sheet_id (str): Sheet identifier (optional, will use config if not provided)
            session (requests.Session): HTTP session (a new one if not provided)
        """
        self.sheet_url = config.get_sheet_url(sheet_id)
        self.query = config.SHEET_QUERY
        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": f"{config.APP_NAME}/{config.APP_VERSION} ({config.USER_EMAIL})"}
        )

        self.stats = {
            "total_rows": 0,
            "total_hikes": 0,
            "total_locations": 0,
            "tracks_resolved": 0,
            "tracks_missing": 0,
            "processing_time": 0.0,
        }

    def fetch_table(self) -> RawTable:
        """
        Fetch and decode the hike log sheet.

        Returns:
            RawTable; without rows if the sheet could not be fetched or decoded
        """
        params = {"tqx": "out:json", "tq": self.query}
        try:
            logger.info(f"Fetching hike log from {self.sheet_url}")
            response = self.session.get(
                self.sheet_url, params=params, timeout=config.REQUEST_TIMEOUT
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error loading sheet data: {e}")
            return RawTable()

        table = table_from_response(unwrap_gviz_response(response.text))
        self.stats["total_rows"] = table.row_count
        return table

    def collect(self) -> HikeDataset:
        """Fetch the sheet and run the processing pipeline over it."""
        dataset = process_table(self.fetch_table())
        self.stats["total_hikes"] = len(dataset.records)
        self.stats["total_locations"] = len(dataset.groups)
        return dataset

    def resolve_tracks(
        self, dataset: HikeDataset, resolver: TrackResolver
    ) -> gpd.GeoDataFrame:
        """
        Resolve the latest hike's track for every location.

        Args:
            dataset: Processed hikes
            resolver: Track resolver to use

        Returns:
            GeoDataFrame with one LineString per resolved track
        """
        primaries = {key: group.primary for key, group in dataset.groups.items()}
        results = asyncio.run(
            resolver.resolve_all([hike.date for hike in primaries.values()])
        )

        rows = []
        for key, hike in primaries.items():
            result = results[hike.date]
            if not result.ok or len(result.points) < 2:
                self.stats["tracks_missing"] += 1
                continue
            self.stats["tracks_resolved"] += 1
            rows.append(
                {
                    "location_key": key,
                    "date": hike.date,
                    "track_key": result.key,
                    "point_count": len(result.points),
                    "geometry": LineString([(p.lng, p.lat) for p in result.points]),
                }
            )

        return gpd.GeoDataFrame(
            rows,
            columns=["location_key", "date", "track_key", "point_count", "geometry"],
            geometry="geometry",
            crs=config.DEFAULT_CRS,
        )

    def write_artifacts(
        self,
        dataset: HikeDataset,
        output_dir: str,
        tracks: gpd.GeoDataFrame | None = None,
    ) -> None:
        """Write the CSV and GeoJSON artifacts for a processed dataset."""
        if dataset.is_empty:
            logger.warning("No hikes to write")
            return

        os.makedirs(output_dir, exist_ok=True)

        csv_path = os.path.join(output_dir, config.HIKES_CSV_FILENAME)
        records_to_dataframe(dataset.records).to_csv(csv_path, index=False)
        logger.info(f"Created CSV artifact: {csv_path}")

        locations_path = os.path.join(output_dir, config.LOCATIONS_GEOJSON_FILENAME)
        groups_to_geodataframe(dataset.groups).to_file(
            locations_path, driver="GeoJSON"
        )
        logger.info(f"Created locations artifact: {locations_path}")

        if tracks is not None and not tracks.empty:
            tracks_path = os.path.join(output_dir, config.TRACKS_GEOJSON_FILENAME)
            tracks.to_file(tracks_path, driver="GeoJSON")
            logger.info(f"Created tracks artifact: {tracks_path}")

    def run(self, output_dir: str, with_tracks: bool = False) -> HikeDataset:
        """
        Main collection workflow.

        Args:
            output_dir: Directory for the artifacts
            with_tracks: Whether to resolve GPX tracks for each location

        Returns:
            The processed HikeDataset
        """
        start_time = datetime.now()
        logger.info("Starting hike log collection")

        dataset = self.collect()

        tracks = None
        if with_tracks and not dataset.is_empty:
            resolver = TrackResolver(
                logger=setup_track_resolver_logging(
                    logging.getLevelName(logger.getEffectiveLevel())
                )
            )
            tracks = self.resolve_tracks(dataset, resolver)

        self.write_artifacts(dataset, output_dir, tracks)

        self.stats["processing_time"] = (datetime.now() - start_time).total_seconds()
        self._print_summary(with_tracks)
        return dataset

    def _print_summary(self, with_tracks: bool) -> None:
        """Print collection summary."""
        logger.info("=" * 50)
        logger.info("COLLECTION SUMMARY")
        logger.info("=" * 50)
        logger.info(f"Sheet rows fetched: {self.stats['total_rows']}")
        logger.info(f"Hikes parsed: {self.stats['total_hikes']}")
        logger.info(f"Trailhead locations: {self.stats['total_locations']}")
        if with_tracks:
            logger.info(f"Tracks resolved: {self.stats['tracks_resolved']}")
            logger.info(f"Tracks missing: {self.stats['tracks_missing']}")
        logger.info(f"Processing time: {self.stats['processing_time']:.2f} seconds")
        logger.info("=" * 50)


def main():
    """Main function."""
    parser = argparse.ArgumentParser(
        description="Fetch the hike log sheet and write map-ready hike artifacts"
    )
    parser.add_argument(
        "--sheet-id",
        help="Google Sheet id (defaults to HIKES_SHEET_ID)",
    )
    parser.add_argument(
        "--output-dir",
        default=config.DEFAULT_OUTPUT_DIRECTORY,
        help=f"Directory for output artifacts (default: {config.DEFAULT_OUTPUT_DIRECTORY})",
    )
    parser.add_argument(
        "--with-tracks",
        action="store_true",
        help="Resolve the latest GPX track for each trailhead",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=config.LOG_LEVEL,
        help="Set logging level",
    )

    args = parser.parse_args()

    logger.setLevel(args.log_level)

    try:
        collector = SheetCollector(sheet_id=args.sheet_id)
        collector.run(args.output_dir, with_tracks=args.with_tracks)
        logger.info("Collection completed successfully")

    except Exception as e:
        logger.error(f"Collection failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
