"""
LeadMiner Orchestrator Module
=============================

Batch pipeline, logging setup and command-line interface.

Components:
    - LeadPipeline: Enrichment -> Scoring -> Export -> Notification
    - setup_logging: Human-readable or JSON lines logging
    - cli.main: `leadminer` console script

Usage:
    from leadminer.orchestrator import LeadPipeline

    result = LeadPipeline().run(records)
    print(result.get_summary())
"""

from .pipeline import (
    LeadPipeline,
    PipelineResult,
    PipelineStage,
    PipelineStatus,
    StageResult,
)
from .logging_config import setup_logging, run_context, JSONFormatter

__all__ = [
    "LeadPipeline",
    "PipelineResult",
    "PipelineStage",
    "PipelineStatus",
    "StageResult",
    "setup_logging",
    "run_context",
    "JSONFormatter",
]
