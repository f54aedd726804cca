"""
LeadMiner - Reputation Lead Engine
==================================

Single-pass batch pipeline turning scraped business reviews into
prioritized sales leads:
  Stage 1: Enrichment (derived review signals)
  Stage 2: Scoring (weighted rubric + priority tier)
  Stage 3: Export (JSON, CSV, text digest)
  Stage 4: Notification (optional webhook delivery of the digest)
"""

__version__ = "1.0.0"
