"""설문 결과 리포트/CSV 내보내기 API 라우터입니다."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import require_roles
from app.models.user import Profile
from app.schemas.report import SurveyReportOut
from app.services import report_service
from app.utils.permissions import AUTHORING_ROLES

router = APIRouter(prefix="/api/reports", tags=["reports"])

require_author = require_roles(*AUTHORING_ROLES)


def _content_disposition(filename: str) -> str:
    fallback = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "resultados.csv"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/{survey_id}", response_model=SurveyReportOut)
def get_report(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_author),
):
    return report_service.get_report(db, survey_id=survey_id, current_user=current_user)


@router.get("/{survey_id}/export.csv")
def export_csv(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_author),
):
    csv_text, filename = report_service.export_csv(db, survey_id=survey_id, current_user=current_user)
    return Response(
        content=csv_text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": _content_disposition(filename)},
    )
