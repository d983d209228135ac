"""
Custom Exception Classes for InvoiceAI

This module defines the error taxonomy of the invoicing backend. Every
exception carries the HTTP status it maps to and, for schema-validation
failures, the list of individual validation errors that is returned to the
client as ``errors``.
"""

from typing import Any

from fastapi import status


class InvoiceAIError(Exception):
    """Base exception class for all InvoiceAI errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        errors: list[dict[str, Any]] | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.errors = errors
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(InvoiceAIError):
    """Raised when no authenticated principal is present"""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class InvalidTokenError(AuthenticationError):
    """Raised when a hosted identity token cannot be verified"""

    def __init__(self, message: str = "Invalid or malformed token"):
        super().__init__(message=message)


class NoTenantError(InvoiceAIError):
    """Raised when the principal has not been assigned a tenant yet"""

    def __init__(self, message: str = "No tenant assigned to this account"):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN)


class AuthorizationError(InvoiceAIError):
    """Raised when user lacks permission for an action"""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN)


class ForbiddenError(AuthorizationError):
    """Raised when a resource belongs to another tenant"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(InvoiceAIError):
    """Base class for resource not found errors"""

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        super().__init__(
            message=f"{resource_type} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class InvoiceNotFoundError(ResourceNotFoundError):
    def __init__(self, invoice_id: Any | None = None):
        super().__init__(resource_type="Invoice", resource_id=invoice_id)


class CompanyNotFoundError(ResourceNotFoundError):
    def __init__(self, company_id: Any | None = None):
        super().__init__(resource_type="Company", resource_id=company_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: Any | None = None):
        super().__init__(resource_type="User", resource_id=user_id)


class TenantNotFoundError(ResourceNotFoundError):
    def __init__(self, tenant_id: Any | None = None):
        super().__init__(resource_type="Tenant", resource_id=tenant_id)


# ============================================================================
# Validation & Business Logic Exceptions
# ============================================================================


class ValidationError(InvoiceAIError):
    """Raised when input validation fails"""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, errors=errors)


class NoClientEmailError(ValidationError):
    """Raised when sending an invoice that has no client email"""

    def __init__(self, message: str = "Invoice has no client email address"):
        super().__init__(message=message)


class DuplicateResourceError(InvoiceAIError):
    """Raised when attempting to create a duplicate resource"""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT)


# ============================================================================
# Upstream (language model, email transport) Exceptions
# ============================================================================


class GenerationError(InvoiceAIError):
    """Base class for failures of the language-model generation step"""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, errors=errors)


class GenerationUpstreamError(GenerationError):
    """Raised when the language model call itself fails"""


class GenerationMalformedError(GenerationError):
    """Raised when the model returned no content or content that is not JSON"""


class GenerationInvalidError(GenerationError):
    """Raised when the model output does not match the invoice schema"""

    def __init__(self, errors: list[dict[str, Any]], message: str = "Generated invoice failed validation"):
        super().__init__(message=message, errors=errors)


class NotificationUpstreamError(InvoiceAIError):
    """Raised when the email transport fails to send an invoice"""

    def __init__(self, message: str = "Failed to send invoice email"):
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
