"""Rule-based advisory text for a pipeline's share of all leads."""

REJECTION_QUALITY = "Review pitch quality; high rejection rate."
SLOW_FOLLOW_UP = "Follow-up speed might be slow."
OVERLOADED = "This pipeline is overloaded — consider redistributing."
HEALTHY = "Healthy pipeline level."
LOW_VOLUME = "Low volume — BOE follow-up may be slow."
MONITOR_BALANCE = "Monitor pipeline balance."


def get_pipeline_insight(pipeline_name: str | None, percentage: float) -> str:
    """First matching rule wins: name rules before percentage bands."""
    name = (pipeline_name or "").lower()
    if "do not" in name:
        return REJECTION_QUALITY
    if "upload" in name:
        return SLOW_FOLLOW_UP
    if percentage > 60:
        return OVERLOADED
    if 25 <= percentage <= 60:
        return HEALTHY
    if percentage < 25:
        return LOW_VOLUME
    # NaN percentages fall through every band
    return MONITOR_BALANCE
