"""Adapters connecting the dashboard core to record storage."""
