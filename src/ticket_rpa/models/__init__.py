"""Data models: ticket requests, run results and job records."""
