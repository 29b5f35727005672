# File: campus_issues/core/errors.py

class CampusIssuesError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CampusIssuesError):
    """Missing or malformed input, caught before any storage call."""
    status_code = 400


class AuthRequired(CampusIssuesError):
    """A write was attempted without a qualifying user or admin session."""
    status_code = 401


class RepositoryError(CampusIssuesError):
    """The store rejected or failed a call."""
    status_code = 502
