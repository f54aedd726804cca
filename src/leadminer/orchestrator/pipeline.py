"""
LeadMiner Pipeline Orchestrator
===============================

Runs a batch of business records through every stage:
1. Enrichment (review signals)
2. Scoring (rubric + priority)
3. Export (JSON artifacts, CSV, digest text)
4. Notification (digest webhook, best effort)

Features:
    - One reference time per run, so every recency signal agrees
    - Observable (per-stage timings, metrics and errors)
    - Fails fast: a broken stage stops the run before later artifacts
    - Starts clean: artifacts from an earlier run are removed first

Usage:
    from leadminer.orchestrator.pipeline import LeadPipeline

    pipeline = LeadPipeline()
    result = pipeline.run(records)
"""

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .logging_config import run_context
from ..data.config import Settings, get_settings
from ..data.data_models import BusinessRecord, ensure_utc
from ..data.lead_store import save_json, save_text
from ..enrichment.enricher import LeadEnricher
from ..enrichment.enrichment_models import EnrichedRecord
from ..errors import LeadStoreError, NoLeadsError, PipelineError
from ..export.digest import generate_digest
from ..export.exporter import LeadExporter
from ..notifications.webhook_notifier import (
    DeliveryResult,
    NOT_CONFIGURED_REASON,
    WebhookNotifier,
)
from ..scoring.lead_scorer import LeadScorer, PriorityTier, ScoredRecord

logger = logging.getLogger(__name__)


ENRICHED_FILE = "enriched-leads.json"
SCORED_FILE = "scored-leads.json"
TOP_FILE = "top-leads.json"
CSV_FILE = "leads.csv"
DIGEST_FILE = "digest.txt"

RUN_ARTIFACTS = (ENRICHED_FILE, SCORED_FILE, TOP_FILE, CSV_FILE, DIGEST_FILE)


class PipelineStage(Enum):
    """Pipeline execution stages."""
    ENRICHMENT = "enrichment"
    SCORING = "scoring"
    EXPORT = "export"
    NOTIFICATION = "notification"


class PipelineStatus(Enum):
    """Pipeline run status."""
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"


@dataclass
class StageResult:
    """Result of a single pipeline stage."""
    stage: PipelineStage
    status: PipelineStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Calculate stage duration."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def add_error(self, error_type: str, message: str, details: Optional[Dict] = None):
        """Record an error."""
        self.errors.append({
            "type": error_type,
            "message": message,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })


@dataclass
class PipelineResult:
    """Complete pipeline run result."""
    run_id: str
    status: PipelineStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    stages: Dict[PipelineStage, StageResult] = field(default_factory=dict)
    scored: List[ScoredRecord] = field(default_factory=list)
    artifacts: Dict[str, Path] = field(default_factory=dict)
    digest: str = ""
    delivery: Optional[DeliveryResult] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        """Calculate total pipeline duration."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def priority_counts(self) -> Dict[str, int]:
        counts = LeadScorer.summarize_distribution(self.scored)
        return {tier.value: count for tier, count in counts.items()}

    def get_summary(self) -> Dict[str, Any]:
        """Get pipeline run summary."""
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "stages": {
                stage.value: {
                    "status": result.status.value,
                    "duration_seconds": result.duration_seconds,
                    "metrics": result.metrics,
                    "error_count": len(result.errors),
                }
                for stage, result in self.stages.items()
            },
            "leads": len(self.scored),
            "priority_counts": self.priority_counts,
            "artifacts": {name: str(path) for name, path in self.artifacts.items()},
            "delivery": self.delivery.to_dict() if self.delivery else None,
        }


class LeadPipeline:
    """
    Batch orchestrator for LeadMiner.

    Stages run strictly in order. Enrichment, scoring and export failures
    abort the run with PipelineError; a failed digest delivery only marks
    the run as a partial failure.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        enricher: Optional[LeadEnricher] = None,
        scorer: Optional[LeadScorer] = None,
        exporter: Optional[LeadExporter] = None,
        notifier: Optional[WebhookNotifier] = None,
    ):
        self.settings = settings or get_settings()
        self.enricher = enricher or LeadEnricher()
        self.scorer = scorer or LeadScorer()
        self.exporter = exporter or LeadExporter()
        self.notifier = notifier or WebhookNotifier(
            webhook_url=self.settings.notifications.webhook_url,
            timeout=self.settings.notifications.timeout,
        )

    @property
    def output_dir(self) -> Path:
        return Path(self.settings.output.output_dir)

    def run(
        self,
        records: Sequence[BusinessRecord],
        now: Optional[datetime] = None,
    ) -> PipelineResult:
        """
        Run the full pipeline on a batch of records.

        Args:
            records: Acquired business records
            now: Reference time for recency signals (default: current UTC time)

        Returns:
            PipelineResult with the ranked leads and written artifacts

        Raises:
            NoLeadsError: records is empty (nothing is written)
            LeadStoreError: a previous artifact could not be removed
            PipelineError: enrichment, scoring or export failed
        """
        if not records:
            raise NoLeadsError("No business records to process")

        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        run_id = str(uuid.uuid4())
        result = PipelineResult(
            run_id=run_id,
            status=PipelineStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
        )

        logger.info(
            f"=== Starting LeadMiner pipeline ({len(records)} records) ===",
            extra={"run_id": run_id},
        )

        with run_context(run_id):
            self._clear_previous_artifacts()
            enriched = self._run_enrichment_stage(result, records, now)
            scored = self._run_scoring_stage(result, enriched, now)
            self._run_export_stage(result, scored)
            self._run_notification_stage(result)

        result.completed_at = datetime.now(timezone.utc)
        failed = [s for s, r in result.stages.items() if r.status == PipelineStatus.FAILED]
        result.status = PipelineStatus.PARTIAL_FAILURE if failed else PipelineStatus.COMPLETED

        logger.info(
            f"=== Pipeline complete: status={result.status.value} "
            f"leads={len(result.scored)} duration={result.duration_seconds:.2f}s ===",
            extra={"run_id": run_id, "duration": result.duration_seconds},
        )
        return result

    def _clear_previous_artifacts(self) -> None:
        """Delete artifacts left in output_dir by an earlier run."""
        for name in RUN_ARTIFACTS:
            path = self.output_dir / name
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise LeadStoreError(f"Failed to remove stale artifact {path}: {e}") from e
            logger.debug(f"Removed previous artifact {path}")

    @contextmanager
    def _stage(self, result: PipelineResult, stage: PipelineStage) -> Iterator[StageResult]:
        """Time a fatal stage; any error marks the run FAILED and is re-raised."""
        stage_result = StageResult(
            stage=stage,
            status=PipelineStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
        )
        result.stages[stage] = stage_result
        logger.info(f"--- STAGE: {stage.value.upper()} ---", extra={"run_id": result.run_id, "stage": stage.value})

        try:
            yield stage_result
        except Exception as e:
            stage_result.status = PipelineStatus.FAILED
            stage_result.add_error(type(e).__name__, str(e))
            stage_result.completed_at = datetime.now(timezone.utc)
            result.status = PipelineStatus.FAILED
            result.completed_at = stage_result.completed_at
            logger.exception(
                f"Stage {stage.value} failed: {e}",
                extra={"run_id": result.run_id, "stage": stage.value},
            )
            raise PipelineError(stage.value, str(e)) from e

        stage_result.status = PipelineStatus.COMPLETED
        stage_result.completed_at = datetime.now(timezone.utc)

    # =========================================================================
    # STAGES
    # =========================================================================

    def _run_enrichment_stage(
        self,
        result: PipelineResult,
        records: Sequence[BusinessRecord],
        now: datetime,
    ) -> List[EnrichedRecord]:
        with self._stage(result, PipelineStage.ENRICHMENT) as stage:
            enriched = self.enricher.enrich_leads(records, now=now)
            path = save_json([e.to_dict() for e in enriched], self.output_dir / ENRICHED_FILE)
            result.artifacts["enriched"] = path
            stage.metrics["enriched"] = len(enriched)
        return enriched

    def _run_scoring_stage(
        self,
        result: PipelineResult,
        enriched: Sequence[EnrichedRecord],
        now: datetime,
    ) -> List[ScoredRecord]:
        with self._stage(result, PipelineStage.SCORING) as stage:
            scored = self.scorer.score_all_leads(enriched, now=now)
            top = self.scorer.top_leads(scored, self.settings.output.top_leads_count)

            result.artifacts["scored"] = self.exporter.export_to_json(scored, self.output_dir / SCORED_FILE)
            result.artifacts["top"] = self.exporter.export_to_json(top, self.output_dir / TOP_FILE)
            result.scored = scored

            counts = self.scorer.summarize_distribution(scored)
            stage.metrics["scored"] = len(scored)
            stage.metrics["critical"] = counts[PriorityTier.CRITICAL]
            stage.metrics["high"] = counts[PriorityTier.HIGH]
            stage.metrics["top_score"] = scored[0].score if scored else None
        return scored

    def _run_export_stage(self, result: PipelineResult, scored: Sequence[ScoredRecord]) -> None:
        with self._stage(result, PipelineStage.EXPORT) as stage:
            result.artifacts["csv"] = self.exporter.export_to_csv(scored, self.output_dir / CSV_FILE)

            result.digest = generate_digest(scored, top_count=self.settings.output.digest_top_count)
            result.artifacts["digest"] = save_text(result.digest, self.output_dir / DIGEST_FILE)
            stage.metrics["rows"] = len(scored)

    def _run_notification_stage(self, result: PipelineResult) -> None:
        """Deliver the digest. Never raises; the digest file is already saved."""
        stage = StageResult(
            stage=PipelineStage.NOTIFICATION,
            status=PipelineStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
        )
        result.stages[PipelineStage.NOTIFICATION] = stage

        delivery = self.notifier.send_digest(result.digest)
        result.delivery = delivery
        stage.metrics["sent"] = delivery.sent

        if delivery.sent or delivery.reason == NOT_CONFIGURED_REASON:
            stage.status = PipelineStatus.COMPLETED
            if not delivery.sent:
                logger.info(f"Digest not sent ({delivery.reason}), saved locally instead")
        else:
            stage.status = PipelineStatus.FAILED
            stage.add_error("DeliveryError", delivery.reason or "unknown")
            logger.warning(f"Digest delivery failed ({delivery.reason}), saved locally instead")

        stage.completed_at = datetime.now(timezone.utc)
