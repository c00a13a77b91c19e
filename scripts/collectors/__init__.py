"""
Data Collection Scripts

This module contains scripts for collecting data from external sources:
- Google Sheets visualization query API for the hike log
- GPX track files (local directory or web server) for recorded hikes
"""
