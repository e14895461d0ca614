"""Core (UI-agnostic) campaign comparison logic.

This package contains:
- data loading (CSV -> cleaned rows -> aggregate)
- week-over-week aggregation per provider
- percent change and ranking helpers
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
