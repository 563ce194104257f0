"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Empty strings pass model validation on purpose: the domain rejects them
with InvalidInput before contacting any collaborator.
"""

from pydantic import BaseModel, Field


class ActivationRequest(BaseModel):
    """Request model for account activation."""

    identifier: str = Field(..., description="Librarian username")
    credential: str = Field(..., description="PIN issued by an administrator")


class ChangeCredentialRequest(BaseModel):
    """Request model for replacing a temporary PIN."""

    identifier: str = Field(..., description="Librarian username")
    current_credential: str = Field(..., description="Current PIN")
    new_credential: str = Field(..., description="New PIN")


class EnrollRequest(BaseModel):
    """Request model for enrolling a librarian."""

    identifier: str = Field(..., description="Username for the new account")
    role: str = Field(default="librarian", description='"admin" or "librarian"')


class StatusResponse(BaseModel):
    """Response model carrying an outcome and a human-readable message."""

    success: bool
    message: str


class ActivationResponse(StatusResponse):
    """Response model for activation; tells the app whether to force a PIN change."""

    role: str = Field(..., description='"admin" or "librarian"')
    require_credential_change: bool = Field(
        ..., description="True while the account still holds a temporary PIN"
    )


class ErrorResponse(StatusResponse):
    """Standard error response model."""

    success: bool = False


class EnrollmentResponse(StatusResponse):
    """Response model for enrollment and reset, returned once to the administrator."""

    identifier: str
    temporary_credential: str
