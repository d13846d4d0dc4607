"""FastAPI 애플리케이션 진입점. 미들웨어, API 라우터, 애플리케이션 상태를 등록합니다."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.config import settings
from app.database import Base, engine
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.routers import auth, dashboard, navigation, reports, surveys
from app.services.session_events import SessionEvents

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Encuestas 설문 관리 시스템",
    description="설문 작성, 응답 수집, 결과 집계/내보내기를 제공하는 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Redirect-To"],
)

# 세션 변경 구독 객체는 애플리케이션이 소유한다.
app.state.session_events = SessionEvents()

app.include_router(auth.router)
app.include_router(navigation.router)
app.include_router(dashboard.router)
app.include_router(surveys.router)
app.include_router(reports.router)


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.warning("[db] %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "요청을 처리하지 못했습니다."})


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)


@app.on_event("shutdown")
def close_session_events():
    app.state.session_events.close()


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "Encuestas 설문 관리 시스템"}
