"""
Repository layer for the wall server.

All SQL lives here and ONLY here. No database access outside this module.
"""

from server.repos.submission_repo import SubmissionRepo

__all__ = [
    "SubmissionRepo",
]
