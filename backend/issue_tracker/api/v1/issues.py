"""
Issue API endpoints.

- POST /issues - Create issues (batch, all or nothing)
- GET /issues - List issues (filters, sort, pagination)
- GET /issues/{issue_id} - Get issue with all property values
- PATCH /issues/{issue_id} - Apply property operations
- DELETE /issues/{issue_id} - Soft delete issue

Every route is scoped to the X-Workspace-Id header.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from issue_tracker.api.deps import DbSession, Pagination, Registry, WorkspaceId
from issue_tracker.api.utils import result_response
from issue_tracker.schemas.issue import (
    CreateIssueInput,
    CreateIssueResult,
    IssueBatchCreate,
    IssueListResult,
    IssueRead,
    IssueUpdate,
    UpdateIssueResult,
)
from issue_tracker.schemas.query import parse_filters, parse_sort
from issue_tracker.services.issue_service import IssueService
from issue_tracker.services.query_service import IssueQueryService

router = APIRouter()


@router.post(
    "",
    response_model=list[CreateIssueResult],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": list[CreateIssueResult]}},
)
async def create_issues(
    db: DbSession,
    registry: Registry,
    workspace_id: WorkspaceId,
    data: IssueBatchCreate,
):
    """Create one or more issues. If any issue is invalid, none are created."""
    service = IssueService(db, registry=registry)
    inputs = [
        CreateIssueInput(workspace_id=workspace_id, property_values=item.property_values)
        for item in data.issues
    ]
    results = await service.create_issues(inputs)
    return result_response(results, all(result.success for result in results))


@router.get("", response_model=IssueListResult)
async def list_issues(
    db: DbSession,
    registry: Registry,
    workspace_id: WorkspaceId,
    pagination: Pagination,
    filters: str | None = Query(default=None, description="JSON array of filter conditions"),
    sort: str | None = Query(default=None, description="JSON array of sort keys"),
):
    """List issues matching every filter, in the requested order."""
    service = IssueQueryService(db, registry=registry)
    return await service.list_issues(
        filters=parse_filters(filters),
        sort=parse_sort(sort),
        page=pagination.page,
        page_size=pagination.page_size,
        workspace_id=workspace_id,
    )


@router.get("/{issue_id}", response_model=IssueRead)
async def get_issue(
    db: DbSession,
    registry: Registry,
    workspace_id: WorkspaceId,
    issue_id: str,
):
    """Get a single issue with all of its property values."""
    service = IssueQueryService(db, registry=registry)
    return await service.get_issue_by_id(issue_id, workspace_id=workspace_id)


@router.patch(
    "/{issue_id}",
    response_model=UpdateIssueResult,
    responses={400: {"model": UpdateIssueResult}},
)
async def update_issue(
    db: DbSession,
    registry: Registry,
    workspace_id: WorkspaceId,
    issue_id: str,
    data: IssueUpdate,
):
    """Apply property operations in order. Either all apply or none do."""
    service = IssueService(db, registry=registry)
    result = await service.update_issue(issue_id, data.operations, workspace_id=workspace_id)
    return result_response(result, result.success)


@router.delete("/{issue_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_issue(
    db: DbSession,
    workspace_id: WorkspaceId,
    issue_id: str,
):
    """Soft delete an issue and its property values."""
    service = IssueService(db)
    await service.delete_issue(issue_id, workspace_id=workspace_id)
    return None
