"""Coach registry - per-coach verification status and duplicate-claim queries."""

from accredit.registry.coaches import CoachRegistry

__all__ = ["CoachRegistry"]
