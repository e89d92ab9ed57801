"""
Well-known stage names for the TrackMyApp flow graph.

Every entry starts at ``APPLICATION_SUBMITTED``; ``ACCEPTED`` and
``REJECTED`` are terminal, so nothing may follow them in an entry.
Any other stage name is free text chosen by the user.

``DefaultStage`` inherits from ``(str, Enum)`` so members compare equal to
the plain-string node keys stored in the graph.
"""

from enum import Enum


class DefaultStage(str, Enum):
    """Stage names with built-in meaning."""

    APPLICATION_SUBMITTED = "Application submitted"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


INITIAL_STAGE = DefaultStage.APPLICATION_SUBMITTED.value

TERMINAL_STAGES = frozenset({DefaultStage.ACCEPTED.value, DefaultStage.REJECTED.value})

# Exact lowercase spellings accepted as the canonical terminal keys.
_TERMINAL_ALIASES = {stage.lower(): stage for stage in TERMINAL_STAGES}


def is_terminal_stage(stage: str) -> bool:
    """Return True when no further stage may follow ``stage``."""
    return stage in TERMINAL_STAGES


def normalize_stage_name(stage: str) -> str:
    """
    Map "accepted"/"rejected" typed in lowercase onto the terminal keys.

    Only the exact lowercase spelling is rewritten; other casings and all
    other names are returned unchanged because node keys are case-sensitive.

    Examples:
        >>> normalize_stage_name("accepted")
        'Accepted'
        >>> normalize_stage_name("Phone screen")
        'Phone screen'
    """
    return _TERMINAL_ALIASES.get(stage, stage)
