"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    session_events,
    auth_service,
    survey_service,
    response_service,
    report_service,
)
