# campusconnect/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from campusconnect.config import settings

# SQLite connections may not be shared across threads unless told otherwise
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def paginate(query, page: int, limit: int):
    """Returns one page of ``query`` and the total row count."""
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total
