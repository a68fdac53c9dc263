"""
Event package recommendation engine.

Responsibilities:
- Accept client criteria (event type, budget, guests, theme, preferences).
- Filter the package catalog to candidates for the requested event type.
- Score and rank candidates using deterministic per-criterion points.
- Cache formatted results and persist recommendations for signed-in clients.
"""
