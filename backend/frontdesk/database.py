"""
Database configuration - SQLAlchemy persistence layer
The booking engine never sees a session; services load rows and hand them over
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from frontdesk.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency: yield a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables"""
    from frontdesk.models import ontology  # noqa
    Base.metadata.create_all(bind=engine)
