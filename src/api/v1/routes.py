"""
API v1 routes.

Defines REST endpoints for librarian account activation and administration.
Handlers are plain functions: the domain blocks on bounded collaborator
calls, so FastAPI runs them in its worker thread pool.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import (
    get_activation_service,
    get_credential_admin_service,
    get_credential_change_service,
    require_admin_key,
)
from src.api.errors import INVALID_INPUT, SERVICE_UNAVAILABLE
from src.api.models import (
    ActivationRequest,
    ActivationResponse,
    ChangeCredentialRequest,
    EnrollmentResponse,
    EnrollRequest,
    ErrorResponse,
    StatusResponse,
)
from src.domain.activation import ActivationService
from src.domain.administration import CredentialAdminService
from src.domain.credentials import CredentialChangeService
from src.domain.exceptions import (
    AccountAlreadyDeleted,
    AccountNotFound,
    AuthenticationFailed,
    IdentifierTaken,
    InvalidInput,
    LastAdminRemoval,
    UpstreamUnavailable,
)

router = APIRouter(tags=["v1"])

ACTIVATION_FAILED = "Activation failed"
CREDENTIAL_CHANGE_FAILED = "Credential change failed"


def _invalid_input() -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_INPUT)


def _unavailable() -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=SERVICE_UNAVAILABLE)


@router.post(
    "/activate",
    response_model=ActivationResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        401: {"model": ErrorResponse, "description": "Activation failed"},
        503: {"model": ErrorResponse, "description": "Service unavailable, retry with backoff"},
    },
    summary="Activate a librarian account",
    description="Submit username and the PIN issued by an administrator to activate "
    "the account. Activating an already active account succeeds again. "
    "The response tells the app whether the PIN must be changed next.",
)
def activate(
    request_data: ActivationRequest,
    service: ActivationService = Depends(get_activation_service),
) -> ActivationResponse:
    """
    Activate account with identifier and PIN.

    - **identifier**: Librarian username
    - **credential**: PIN issued by an administrator
    """
    try:
        account = service.activate(request_data.identifier, request_data.credential)
    except InvalidInput:
        raise _invalid_input() from None
    except AuthenticationFailed:
        # Unknown account and wrong PIN are indistinguishable
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ACTIVATION_FAILED,
        ) from None
    except UpstreamUnavailable:
        raise _unavailable() from None

    return ActivationResponse(
        success=True,
        message="Account activated",
        role=account.role.value,
        require_credential_change=account.require_credential_change,
    )


@router.post(
    "/change-credential",
    response_model=StatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        401: {"model": ErrorResponse, "description": "Credential change failed"},
        503: {"model": ErrorResponse, "description": "Service unavailable, retry with backoff"},
    },
    summary="Replace the PIN of an active account",
    description="Submit the current PIN and a new one. Clears the "
    "PIN-change requirement set by enrollment and reset.",
)
def change_credential(
    request_data: ChangeCredentialRequest,
    service: CredentialChangeService = Depends(get_credential_change_service),
) -> StatusResponse:
    """Replace a librarian's PIN."""
    try:
        service.change_credential(
            request_data.identifier,
            request_data.current_credential,
            request_data.new_credential,
        )
    except InvalidInput:
        raise _invalid_input() from None
    except AuthenticationFailed:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=CREDENTIAL_CHANGE_FAILED,
        ) from None
    except UpstreamUnavailable:
        raise _unavailable() from None

    return StatusResponse(success=True, message="Credential changed")


@router.post(
    "/admin/librarians",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_key)],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        403: {"model": ErrorResponse, "description": "Missing or wrong admin key"},
        409: {"model": ErrorResponse, "description": "Identifier already taken"},
        503: {"model": ErrorResponse, "description": "Service unavailable, retry with backoff"},
    },
    summary="Enroll a librarian",
    description="Create an inactive account and return its temporary PIN. "
    "Requires the X-Admin-Key header.",
)
def enroll_librarian(
    request_data: EnrollRequest,
    service: CredentialAdminService = Depends(get_credential_admin_service),
) -> EnrollmentResponse:
    """Enroll a librarian with a temporary PIN."""
    try:
        issued = service.enroll(request_data.identifier, request_data.role)
    except InvalidInput:
        raise _invalid_input() from None
    except IdentifierTaken:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Identifier already taken",
        ) from None
    except UpstreamUnavailable:
        raise _unavailable() from None

    return EnrollmentResponse(
        success=True,
        message="Librarian enrolled",
        identifier=issued.identifier,
        temporary_credential=issued.credential,
    )


@router.post(
    "/admin/librarians/{identifier}/reset-credential",
    response_model=EnrollmentResponse,
    dependencies=[Depends(require_admin_key)],
    responses={
        403: {"model": ErrorResponse, "description": "Missing or wrong admin key"},
        404: {"model": ErrorResponse, "description": "No such librarian"},
        503: {"model": ErrorResponse, "description": "Service unavailable, retry with backoff"},
    },
    summary="Reset a librarian's PIN",
    description="Issue a new temporary PIN and deactivate the account until "
    "it is activated again. Requires the X-Admin-Key header.",
)
def reset_librarian_credential(
    identifier: str,
    service: CredentialAdminService = Depends(get_credential_admin_service),
) -> EnrollmentResponse:
    """Reset a librarian's PIN."""
    try:
        issued = service.reset_credential(identifier)
    except InvalidInput:
        raise _invalid_input() from None
    except AccountNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Librarian not found",
        ) from None
    except UpstreamUnavailable:
        raise _unavailable() from None

    return EnrollmentResponse(
        success=True,
        message="Credential reset",
        identifier=issued.identifier,
        temporary_credential=issued.credential,
    )


@router.delete(
    "/admin/librarians/{identifier}",
    response_model=StatusResponse,
    dependencies=[Depends(require_admin_key)],
    responses={
        403: {"model": ErrorResponse, "description": "Missing or wrong admin key"},
        404: {"model": ErrorResponse, "description": "No such librarian"},
        409: {
            "model": ErrorResponse,
            "description": "Already deleted, or the last remaining admin",
        },
        503: {"model": ErrorResponse, "description": "Service unavailable, retry with backoff"},
    },
    summary="Delete a librarian",
    description="Soft-delete the account so it can no longer sign in. "
    "The last remaining admin cannot be deleted. Requires the X-Admin-Key header.",
)
def delete_librarian(
    identifier: str,
    service: CredentialAdminService = Depends(get_credential_admin_service),
) -> StatusResponse:
    """Soft-delete a librarian."""
    try:
        service.delete(identifier)
    except InvalidInput:
        raise _invalid_input() from None
    except AccountNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Librarian not found",
        ) from None
    except AccountAlreadyDeleted:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Librarian already deleted",
        ) from None
    except LastAdminRemoval:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot delete the last admin",
        ) from None
    except UpstreamUnavailable:
        raise _unavailable() from None

    return StatusResponse(success=True, message="Librarian deleted")
