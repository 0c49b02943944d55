# listing_admin/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from listing_admin.core.config import settings
from listing_admin.db.base import Base


def build_engine(url: str):
    connect_args = {}
    if make_url(url).get_backend_name() == "sqlite":
        # sessions are handed to worker threads by run_in_threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(settings.sqlalchemy_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_models(bind=None):
    # Import model modules so metadata is populated before create_all
    from listing_admin.models import property as prop  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
