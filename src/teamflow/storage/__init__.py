"""Database-backed persistence adapters."""
