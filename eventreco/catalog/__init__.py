"""
Package catalog.

Responsibilities:
- Normalize a raw event-package export into the canonical Package schema.
- Persist the cleaned catalog as CSV.
- Serve candidate packages (all, or by category) to the recommender.
"""
