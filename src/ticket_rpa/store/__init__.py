"""Job persistence for asynchronous automation runs."""

from ticket_rpa.store.job_store import JobStore, build_job_store

__all__ = ["JobStore", "build_job_store"]
