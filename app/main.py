import asyncio
import logging
import os
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.database import SessionLocal, get_db
from app.logging_config import setup_logging
from app.routers.matches import router as matches_router
from app.routers.moments import router as moments_router
from app.routers.users import router as users_router
from app.services.query_service import build_query_service
from app.tasks.moment_reaper import run_reaper_loop

logger = logging.getLogger(__name__)

RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "true").lower() == "true"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def _run_alembic_upgrade() -> None:
    """앱 기동 시 DB 마이그레이션 자동 적용 (moments, matches, user_locations)."""
    from alembic import command
    from alembic.config import Config

    root = Path(__file__).resolve().parent.parent
    cfg = Config(str(root / "alembic.ini"))
    cfg.attributes["skip_logging_config"] = True
    command.upgrade(cfg, "head")


app = FastAPI(
    title="VibeLink API",
    description="근거리 모먼트 검색, 주변 사용자 클러스터, 매치 요청/수락/거절 백엔드 API",
    version="0.1.0",
)


@app.on_event("startup")
def _startup() -> None:
    """로깅 → 마이그레이션 → 서비스 조립. 만료 리퍼는 다음 핸들러에서 시작."""
    setup_logging()
    if RUN_MIGRATIONS:
        try:
            _run_alembic_upgrade()
        except Exception:
            # DB 미기동 등 실패 시에도 앱은 기동 (예: 로컬에서 DB 없이 실행 시)
            logger.exception("alembic upgrade failed")
    app.state.query_service = build_query_service(SessionLocal)


@app.on_event("startup")
async def _start_reaper() -> None:
    app.state.reaper_task = asyncio.create_task(run_reaper_loop(app.state.query_service))


@app.on_event("shutdown")
async def _stop_reaper() -> None:
    task = getattr(app.state, "reaper_task", None)
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app.include_router(moments_router)
app.include_router(matches_router)
app.include_router(users_router)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    return {"status": "ok"}


@app.get("/health/db", tags=["Health"])
def health_db(db: Session = Depends(get_db)) -> dict:
    """DB 연결 확인 (SELECT 1)."""
    db.execute(text("SELECT 1"))
    return {"status": "ok"}


@app.get("/", tags=["Root"])
async def root() -> dict:
    return {
        "message": "VibeLink API에 오신 것을 환영합니다.",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
