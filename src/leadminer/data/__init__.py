"""
LeadMiner Data Module
=====================

Business record acquisition, validation and persistence.

This module provides:
    - ApifyReviewClient: Google Maps + TripAdvisor scraping via Apify
    - generate_demo_leads: Deterministic synthetic records (no token needed)
    - Data models: BusinessRecord, Review, LeadSource
    - record_schema: Pydantic validation of raw provider / file payloads
    - lead_store: JSON artifact load/save

Quick Start:
    from leadminer.data import generate_demo_leads, load_records

    records = generate_demo_leads(count=20)
    records = load_records("output/scraped-leads.json")

Configuration:
    Set environment variables or create a .env file.
    See .env.example for all available options.
"""

from .config import get_settings, reset_settings, Settings
from .data_models import BusinessRecord, Review, LeadSource
from .record_schema import parse_record, parse_records
from .lead_store import load_records, save_json
from .demo_generator import generate_demo_leads
from .apify_client import ApifyReviewClient, deduplicate_leads

__all__ = [
    "get_settings",
    "reset_settings",
    "Settings",
    "BusinessRecord",
    "Review",
    "LeadSource",
    "parse_record",
    "parse_records",
    "load_records",
    "save_json",
    "generate_demo_leads",
    "ApifyReviewClient",
    "deduplicate_leads",
]
