"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidRequestError(ValidationError):
    """A request is missing one of its required inputs."""


class MalformedCodeError(ValidationError):
    """Account code does not match the SEG1-SEG2-SEG3-SEG4 structure."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as a second active rule for one account code."""


class StoreUnavailableError(DomainError):
    """The ledger or rule store failed to serve a request."""


def malformed_code(code: object) -> str:
    """Return message for an account code with the wrong structure."""
    return f"Malformed account code '{code}': expected SEG1-SEG2-SEG3-SEG4 with widths 4-4-3-3"


def report_not_found(report_id: int) -> str:
    """Return message for missing report."""
    return f"Report {report_id} not found"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing classification rule."""
    return f"Classification rule {rule_id} not found"


def row_not_found(row_id: int) -> str:
    """Return message for missing ledger row."""
    return f"Ledger row {row_id} not found"


def duplicate_active_rule(account_code: str, rule_id: int) -> str:
    """Return message when an account code already has an active rule."""
    return f"Account code '{account_code}' already has an active rule (ID: {rule_id})"


def missing_fields(*names: str) -> str:
    """Return message listing required request fields that were not supplied."""
    plural = "s" if len(names) != 1 else ""
    return f"Missing required field{plural}: {', '.join(names)}"
