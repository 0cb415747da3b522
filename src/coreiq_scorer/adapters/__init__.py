"""Adapters: in-memory assessment handles and CSV export."""
