"""Admin routes — history exports, gated by ?key=<ADMIN_KEY>."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from server.auth import require_admin
from server.repos.submission_repo import SubmissionRepo
from server.services.export import CSV_MEDIA_TYPE, XLSX_MEDIA_TYPE, attachment_header, to_csv, to_xlsx

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])
submission_repo = SubmissionRepo()


@router.get("/export.csv")
async def export_csv() -> Response:
    """Every submission ever accepted, oldest first, as CSV."""
    submissions = await submission_repo.list_all()
    return Response(
        content=to_csv(submissions),
        media_type=CSV_MEDIA_TYPE,
        headers=attachment_header("csv"),
    )


@router.get("/export.xlsx")
async def export_xlsx() -> Response:
    """Every submission ever accepted, oldest first, as an Excel workbook."""
    submissions = await submission_repo.list_all()
    return Response(
        content=to_xlsx(submissions),
        media_type=XLSX_MEDIA_TYPE,
        headers=attachment_header("xlsx"),
    )
