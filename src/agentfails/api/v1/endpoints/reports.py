# src/agentfails/api/v1/endpoints/reports.py
"""Report endpoints for the Agent Fails API."""

from fastapi import APIRouter, status

from agentfails.schemas.report import ReportCreate, ReportResponse
from agentfails.services.post_service import file_report

from ..dependencies import SessionDep, get_post_or_404

router = APIRouter(prefix="/posts", tags=["reports"])


@router.post("/{post_id}/report", status_code=status.HTTP_201_CREATED)
async def report_post(
    post_id: int,
    data: ReportCreate,
    db: SessionDep,
) -> dict[str, ReportResponse]:
    """Report a post. Reports are append-only."""
    post = get_post_or_404(db, post_id)
    report = file_report(db, post=post, data=data)
    db.commit()
    db.refresh(report)
    return {"report": ReportResponse.model_validate(report)}
