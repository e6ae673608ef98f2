"""Ledger-facing services and batch orchestration."""
