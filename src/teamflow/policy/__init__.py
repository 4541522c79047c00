"""Reactive policies wired to domain events."""

from teamflow.policy.team_reorganization import TeamReorganizationPolicy

__all__ = ["TeamReorganizationPolicy"]
