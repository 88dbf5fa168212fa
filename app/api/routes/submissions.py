from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.core.auth import verify_bearer_token
from app.core.errors import NotFoundAppError
from app.core.rate_limit import get_client_ip
from app.schemas.submission import (
    Pagination,
    SubmissionListResponse,
    SubmissionResponse,
    SubmitRequest,
    SubmitResponse,
)
from app.services.submission_service import SubmissionService

router = APIRouter(tags=["Submissions"])


def get_submission_service(request: Request) -> SubmissionService:
    """Return the intake service built during application startup."""
    return request.app.state.container.submission_service


ServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]


@router.post(
    "/submit",
    response_model=SubmitResponse,
    response_model_exclude_none=True,
)
async def submit_form(
    payload: SubmitRequest,
    request: Request,
    service: ServiceDep,
) -> SubmitResponse:
    """Accept a form submission.

    Verifies the Turnstile token, applies the per-address rate limit, stores
    the submission and triggers the email notification in the background.

    Args:
        payload: ``{turnstileToken, formId, data}``.

    Returns:
        SubmitResponse: The assigned submission id.

    Raises:
        ValidationAppError: 400 when a required field is missing.
        VerificationAppError: 403 when verification fails.
        RateLimitAppError: 429 when the caller exceeded its quota.
        StorageAppError: 500 when the submission could not be stored.
    """
    app_settings = request.app.state.settings.app
    submission_id = await service.submit(
        payload,
        client_ip=get_client_ip(request, app_settings.client_ip_header),
        user_agent=request.headers.get("user-agent") or "unknown",
    )
    return SubmitResponse(submission_id=submission_id)


@router.get(
    "/submissions/{form_id}",
    response_model=SubmissionListResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_bearer_token)],
)
async def list_submissions(
    form_id: str,
    request: Request,
    service: ServiceDep,
    limit: Annotated[int | None, Query(ge=1)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> SubmissionListResponse:
    """List submissions of a form, newest first.

    ``limit`` defaults to the configured page size and is capped at the
    configured maximum.
    """
    app_settings = request.app.state.settings.app
    page_size = min(limit or app_settings.default_page_size, app_settings.max_page_size)

    submissions = await service.list_submissions(form_id, limit=page_size, offset=offset)
    return SubmissionListResponse(
        form_id=form_id,
        submissions=submissions,
        pagination=Pagination(limit=page_size, offset=offset),
    )


@router.get(
    "/submission/{submission_id}",
    response_model=SubmissionResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_bearer_token)],
)
async def get_submission(submission_id: str, service: ServiceDep) -> SubmissionResponse:
    """Fetch one submission by id.

    Raises:
        NotFoundAppError: 404 when no submission has this id.
    """
    submission = await service.get_submission(submission_id)
    if submission is None:
        raise NotFoundAppError(
            code="submission_not_found",
            message="Submission not found",
            details={"submission_id": submission_id},
        )
    return SubmissionResponse(submission=submission)
