"""
domain.exceptions - Custom exception hierarchy for the insurance AI assistant.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.

Two families matter to the conversational agent:
    BusinessError        - safe to show to the user verbatim. Raised inside
                           the tool loop, it becomes the tool's result so the
                           model can explain it.
    InfrastructureError  - model provider, datastore or index failures.
                           Terminates the turn; callers only ever see a
                           generic failure message.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


# ---------------------------------------------------------------------------
# Business errors
# ---------------------------------------------------------------------------

class BusinessError(DomainError):
    """An expected, user-facing failure (missing entity, denied access, bad input)."""


class NotFoundError(BusinessError):
    """Raised when a referenced plan, policy, chat, agent or user does not exist."""


class ForbiddenError(BusinessError):
    """Raised when the caller is authenticated but may not touch the resource."""


class InvalidArgumentError(BusinessError):
    """Raised when tool or request arguments fail validation."""


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class AuthenticationError(DomainError):
    """Raised when authentication fails (bad credentials, expired token)."""


class DuplicateAccountError(DomainError):
    """Raised when attempting to register with an email that already exists."""


# ---------------------------------------------------------------------------
# Infrastructure errors
# ---------------------------------------------------------------------------

class InfrastructureError(DomainError):
    """Raised when a backing system fails. Never exposes internal detail."""


class RepositoryError(InfrastructureError):
    """Raised when a database operation fails."""


class RetrievalError(InfrastructureError):
    """Raised when the document index cannot be loaded or queried."""


class LLMProviderError(InfrastructureError):
    """Raised when the language-model call fails (timeout, provider error)."""


class OrchestrationLimitError(InfrastructureError):
    """Raised when the tool-call loop exceeds its round ceiling."""
