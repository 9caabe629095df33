"""GitHub access: the API client and the issue reconciliation service."""
