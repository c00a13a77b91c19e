"""
Hike Map Scripts Package

This package contains the hike log collection and processing scripts
organized into logical subdirectories:

- collectors/: Fetching the hike log sheet and GPX tracks, plus their schemas
- processors/: Schema detection, row normalization and location grouping
"""
