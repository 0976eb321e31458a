# turnos/core/database.py
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from turnos.core.config import Settings, get_settings

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    elif settings.DATABASE_SSL:
        connect_args["sslmode"] = "require"
    return create_engine(url, connect_args=connect_args, pool_pre_ping=not url.startswith("sqlite"))


engine = build_engine(get_settings())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    # models must be imported so their tables are registered on Base
    from turnos.ticket import models  # noqa: F401

    Base.metadata.create_all(bind=bind)


# Common DB dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
