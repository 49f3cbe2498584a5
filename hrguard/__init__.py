"""hrguard: access-control and audit-trail pipeline for the HR/timesheet backend."""

__version__ = "0.1.0"
