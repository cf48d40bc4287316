"""
Opsboard: Error taxonomy

  DomainValidationError  form input rejected before any mutation or remote call
  PermissionDenied       role-gated action refused locally
  ApiError               the REST collaborator failed or answered non-2xx
  MutationInProgress     a row already has a mutation in flight
"""


class OpsboardError(Exception):
    """Base class for every error surfaced to the presentation layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DomainValidationError(OpsboardError):
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class PermissionDenied(OpsboardError):
    pass


class ApiError(OpsboardError):
    def __init__(self, message: str, status_code: int | None = None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class MutationInProgress(OpsboardError):
    def __init__(self, entity_id: str):
        super().__init__(f"'{entity_id}' is already being updated.")
        self.entity_id = entity_id
