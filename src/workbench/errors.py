# -----------------------------------------------------------------------------
# Error taxonomy
#   ClientError         → transport failure or structured remote error
#   FormValidationError → local validation, raised before any request is made
#   CatalogError        → malformed seed catalog file
# A goal-seek that does not converge is NOT an error (see GoalSeekResult).
# -----------------------------------------------------------------------------

from __future__ import annotations


class WorkbenchError(Exception):
    """Base exception for all workbench errors"""
    pass


class ClientError(WorkbenchError):
    """Any failed call to the remote service, normalized to one message"""
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FormValidationError(WorkbenchError):
    """Form input rejected on the client"""
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class CatalogError(WorkbenchError): pass
