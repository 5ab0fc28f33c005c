from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import DEFAULT_DB_URL, STORAGE_DIR, settings

DB_URL = settings.database_url

connect_args = {}
if DB_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}  # SQLite & FastAPI 필수 설정
if DB_URL == DEFAULT_DB_URL:
    # 기본 SQLite 파일 위치 보장
    STORAGE_DIR.mkdir(parents=True, exist_ok=True)

engine = create_engine(DB_URL, connect_args=connect_args, future=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
