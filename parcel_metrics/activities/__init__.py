"""Pipeline activities.

Each activity performs a single unit of work:
- decode: Extract polygon features from KML/KMZ or Shapefile input
- measure: Compute area, centroid and bounding box for one feature
- aggregate: Measure every feature and total the areas
- format_report: Render a report as summary text and a structured dict
"""
