"""Display helpers for assessment results and history entries."""

from typing import List, Optional, Sequence, Union

from medunify_assessment.models.assessment import Condition
from medunify_assessment.models.messages import SessionSummary
from medunify_assessment.models.status import OverallStatus, UrgencyLevel


URGENCY_LABELS = {
    UrgencyLevel.LOW: "Low",
    UrgencyLevel.MODERATE: "Moderate",
    UrgencyLevel.MODERATE_HIGH: "Moderate-High",
    UrgencyLevel.HIGH: "High",
    UrgencyLevel.URGENT: "Urgent",
    UrgencyLevel.EMERGENCY: "Emergency",
}

# Severity rank, independent of condition confidence
URGENCY_ORDER = [
    UrgencyLevel.LOW,
    UrgencyLevel.MODERATE,
    UrgencyLevel.MODERATE_HIGH,
    UrgencyLevel.HIGH,
    UrgencyLevel.URGENT,
    UrgencyLevel.EMERGENCY,
]

OVERALL_STATUS_LABELS = {
    OverallStatus.HEALTHY: "Generally Healthy",
    OverallStatus.NEEDS_ATTENTION: "Needs Attention",
    OverallStatus.CONCERNING: "Concerning",
    OverallStatus.URGENT: "Urgent Care Needed",
}


def urgency_label(level: Union[UrgencyLevel, str]) -> str:
    """Label for an urgency level; unknown values are shown as-is."""
    try:
        return URGENCY_LABELS[UrgencyLevel(level)]
    except ValueError:
        return str(level)


def overall_status_label(status: Union[OverallStatus, str]) -> str:
    """Label for an overall assessment status; unknown values are shown as-is."""
    try:
        return OVERALL_STATUS_LABELS[OverallStatus(status)]
    except ValueError:
        return str(status)


def urgency_rank(level: Union[UrgencyLevel, str]) -> int:
    return URGENCY_ORDER.index(UrgencyLevel(level))


def most_urgent(conditions: Sequence[Condition]) -> Optional[Condition]:
    """Condition with the highest urgency; ties keep the server's order."""
    if not conditions:
        return None
    return max(conditions, key=lambda c: urgency_rank(c.urgency_level))


def by_urgency(conditions: Sequence[Condition]) -> List[Condition]:
    """Conditions from most to least urgent; ties keep the server's order."""
    return sorted(conditions, key=lambda c: -urgency_rank(c.urgency_level))


def truncated_summary(session: SessionSummary, max_words: int = 10) -> str:
    """Short headline for a history entry."""
    summary = session.results_summary or session.last_message or "Assessment session"
    words = summary.split(" ")
    if len(words) <= max_words:
        return summary
    return " ".join(words[:max_words]) + "..."
