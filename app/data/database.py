# app/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.utils.settings import DATABASE_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    #sqlite:// w pamieci - tylko do testow: jedno wspolne polaczenie (i jego transakcja)
    #dla wszystkich sesji i watkow, inaczej kazda sesja mialaby pusta baze
    if url in ("sqlite://", "sqlite:///:memory:"):
        logger.warning("In-memory SQLite shares one connection across threads, use it for tests only")
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def init_db():
    #import modeli zeby zarejestrowaly sie w Base.metadata
    import app.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
