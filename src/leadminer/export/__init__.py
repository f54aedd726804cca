"""
LeadMiner Export
================

Flat CSV/JSON export of scored leads and the daily digest text.
"""

from .exporter import LeadExporter, CSV_COLUMNS, FIELD_KEYS
from .digest import generate_digest, LeadSummary, summaries_from_dicts

__all__ = [
    "LeadExporter",
    "CSV_COLUMNS",
    "FIELD_KEYS",
    "generate_digest",
    "LeadSummary",
    "summaries_from_dicts",
]
