"""
Configuration settings for the Hike Map project.

This module centralizes all configuration values and provides a single source of truth for all
configurable parameters.
"""

import os
from typing import Optional


class Config:
    """
    Central configuration class for the Hike Map project.

    This class consolidates all configuration values including the hike log
    sheet location, track file conventions, request settings, output paths
    and logging parameters.
    """

    # Request identification
    APP_NAME: str = "Python-Hike-Map"
    APP_VERSION: str = "1.0"
    USER_EMAIL: str = "unknown@example.com"

    # Hike log sheet (Google Sheets visualization query endpoint)
    GVIZ_BASE_URL: str = "https://docs.google.com/spreadsheets/d"
    SHEET_ID: Optional[str] = None
    SHEET_QUERY: str = "SELECT *"

    # Request Settings
    REQUEST_TIMEOUT: int = 30

    # Track files: <TRACK_BASE_URL>/<TRACK_DIRECTORY>/<YYYYMMDD>.<TRACK_EXTENSION>
    # TRACK_BASE_URL may be an http(s) URL or a local directory.
    TRACK_BASE_URL: str = "."
    TRACK_DIRECTORY: str = "gpx"
    TRACK_EXTENSION: str = "gpx"

    # File Paths
    DEFAULT_OUTPUT_DIRECTORY: str = "artifacts"
    HIKES_CSV_FILENAME: str = "hikes.csv"
    LOCATIONS_GEOJSON_FILENAME: str = "hike_locations.geojson"
    TRACKS_GEOJSON_FILENAME: str = "hike_tracks.geojson"
    DEFAULT_CRS: str = "EPSG:4326"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024  # 5MB
    LOG_BACKUP_COUNT: int = 3
    SHEET_LOG_FILE: str = "logs/sheet_collector.log"
    TRACK_LOG_FILE: str = "logs/track_resolver.log"

    VALID_LOG_LEVELS: tuple = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(self):
        """Initialize configuration by loading from environment variables."""
        self._load_from_env()
        self._validate()

    def _load_from_env(self):
        """Load configuration values from environment variables."""
        # Sheet settings
        sheet_id = os.getenv("HIKES_SHEET_ID")
        if sheet_id:
            self.SHEET_ID = sheet_id

        sheet_query = os.getenv("HIKES_SHEET_QUERY")
        if sheet_query:
            self.SHEET_QUERY = sheet_query

        user_email = os.getenv("HIKES_USER_EMAIL")
        if user_email:
            self.USER_EMAIL = user_email

        # Track settings
        track_base_url = os.getenv("TRACK_BASE_URL")
        if track_base_url:
            self.TRACK_BASE_URL = track_base_url

        # Optional overrides
        request_timeout = os.getenv("REQUEST_TIMEOUT")
        if request_timeout:
            self.REQUEST_TIMEOUT = int(request_timeout)

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            self.LOG_LEVEL = log_level

    def _validate(self):
        """
        Validate configuration values.

        Raises:
            ValueError: If a configured value is out of range.
        """
        if self.REQUEST_TIMEOUT <= 0:
            raise ValueError(
                f"REQUEST_TIMEOUT must be a positive number of seconds, got {self.REQUEST_TIMEOUT}"
            )

        if self.LOG_LEVEL.upper() not in self.VALID_LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {', '.join(self.VALID_LOG_LEVELS)}, got '{self.LOG_LEVEL}'"
            )

    def get_sheet_url(self, sheet_id: str | None = None) -> str:
        """
        Generate the visualization query URL for the hike log sheet.

        Args:
            sheet_id: Sheet identifier (optional, uses SHEET_ID if not provided)

        Returns:
            str: Query endpoint URL without query parameters

        Raises:
            ValueError: If no sheet id is configured
        """
        sheet_id = sheet_id or self.SHEET_ID
        if not sheet_id:
            raise ValueError(
                "HIKES_SHEET_ID environment variable is required. "
                "Please set it in your .env file or pass --sheet-id."
            )
        return f"{self.GVIZ_BASE_URL}/{sheet_id}/gviz/tq"


# Global configuration instance
config = Config()
