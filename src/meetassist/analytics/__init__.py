"""Stored per-period analytics and the live dashboard aggregation."""
