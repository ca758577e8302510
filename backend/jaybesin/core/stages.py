"""
Stage registry: the one ordered list of logistics stages.
Tracker, admin console and document generator all read from here;
nothing redefines the list locally.
"""

from dataclasses import dataclass

# Bump whenever a label changes so clients can detect a stale copy
STAGES_VERSION = 1

LOGISTICS_STAGES: tuple[str, ...] = (
    "Order Initiated",
    "Received at China Warehouse",
    "Quality Check & Consolidation",
    "Container Stuffing (Manifested)",
    "Vessel Departed Origin",
    "In Transit (High Seas)",
    "Arrived at TEMA Port",
    "Customs Clearance in Progress",
    "Duties Paid / Released",
    "Ready for Pickup / Delivery",
)

INITIAL_STAGE = LOGISTICS_STAGES[0]

UNKNOWN_STAGE_INDEX = -1

# Progress shown for a status outside the registry (never an empty bar)
UNKNOWN_STAGE_PROGRESS = 5


@dataclass(frozen=True)
class StageStep:
    """One row of the tracker timeline"""
    index: int
    label: str
    completed: bool
    current: bool


def stage_index(status: str | None) -> int:
    """0-based position of status, or -1 when it is not a known stage."""
    try:
        return LOGISTICS_STAGES.index(status)
    except ValueError:
        return UNKNOWN_STAGE_INDEX


def is_valid_stage(status: str | None) -> bool:
    return stage_index(status) != UNKNOWN_STAGE_INDEX


def progress_percent(status: str | None) -> int:
    """
    Percent complete for a status.
    Unknown (including empty) → 5, otherwise round((index + 1) / len × 100).
    """
    index = stage_index(status)
    if index == UNKNOWN_STAGE_INDEX:
        return UNKNOWN_STAGE_PROGRESS
    return round((index + 1) / len(LOGISTICS_STAGES) * 100)


def stage_timeline(status: str | None) -> list[StageStep]:
    current = stage_index(status)
    return [
        StageStep(
            index=i,
            label=label,
            completed=current >= i,
            current=current == i,
        )
        for i, label in enumerate(LOGISTICS_STAGES)
    ]
