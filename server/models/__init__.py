"""
Pydantic models for the wall server.

All data shapes defined here. No imports from db, repos, or routes.
"""

from server.models.submission import EXPORT_COLUMNS, NewSubmission, Submission

__all__ = [
    "EXPORT_COLUMNS",
    "NewSubmission",
    "Submission",
]
