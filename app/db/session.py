from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from app.core.config import settings


def build_engine(database_uri: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_uri.startswith("sqlite") else {}
    return create_engine(database_uri, connect_args=connect_args, pool_pre_ping=True)


engine = build_engine(settings.SQLALCHEMY_DATABASE_URI)
