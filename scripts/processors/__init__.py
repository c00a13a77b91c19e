"""
Data Processing Scripts

This module contains the pure processing stages for the hike log:
- Column detection over an unknown sheet layout
- Row normalization into display-ready hike records
- Grouping of hikes by trailhead
"""
