"""
Daily digest text.

Short plain-text summary of a scored batch, sized for a chat message:
totals, per-priority counts, and the top N leads.
"""

from typing import Any, Dict, List, NamedTuple, Sequence

from ..scoring.lead_scorer import PriorityTier


class LeadSummary(NamedTuple):
    """The three fields a digest line needs."""
    name: str
    score: int
    priority: PriorityTier

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeadSummary":
        """Build from one entry of a scored-leads JSON file."""
        return cls(
            name=str(data.get("name", "")),
            score=int(data["score"]),
            priority=PriorityTier(data["priority"]),
        )


def summaries_from_dicts(items: Sequence[Dict[str, Any]]) -> List[LeadSummary]:
    return [LeadSummary.from_dict(item) for item in items]


def generate_digest(leads: Sequence[Any], top_count: int = 5) -> str:
    """
    Build the digest for an already ranked batch.

    Args:
        leads: ScoredRecord or LeadSummary items, highest score first
        top_count: Number of leads to list

    Returns:
        Multi-line digest text
    """
    counts = {tier: 0 for tier in PriorityTier}
    for lead in leads:
        counts[PriorityTier(lead.priority)] += 1

    lines = [
        "LeadMiner Daily Digest",
        f"Total leads: {len(leads)}",
        (
            f"Critical: {counts[PriorityTier.CRITICAL]} | "
            f"High: {counts[PriorityTier.HIGH]} | "
            f"Medium: {counts[PriorityTier.MEDIUM]} | "
            f"Low: {counts[PriorityTier.LOW]}"
        ),
        "",
        f"Top {top_count} Leads:",
    ]
    for idx, lead in enumerate(leads[:top_count], 1):
        lines.append(f"{idx}. {lead.name} - Score {lead.score} ({PriorityTier(lead.priority).value})")

    return "\n".join(lines)
