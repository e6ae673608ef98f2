"""File-backed sources for deployments and work items."""
