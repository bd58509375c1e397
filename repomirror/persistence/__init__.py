"""Append-only run log for scheduled backups."""
