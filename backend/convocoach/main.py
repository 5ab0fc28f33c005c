from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db import Base, engine
from .errors import CoachError
from .api import router
from . import models  # noqa: F401  테이블 등록

logger = logging.getLogger(__name__)


async def coach_error_handler(request: Request, exc: CoachError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail},
    )


def create_app(create_tables: bool = True) -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="ConvoCoach Feedback Backend")

    if create_tables:
        Base.metadata.create_all(bind=engine)

    # 앱 개발용 CORS (배포 시 CORS_ORIGINS로 제한)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CoachError, coach_error_handler)
    app.include_router(router)
    return app


app = create_app()
