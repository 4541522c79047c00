"""Domain layer: value objects, events, aggregates and the reorganization service.

Nothing in here performs I/O directly; persistence and notifications are
reached through the ports in :mod:`teamflow.core.interfaces`.
"""
