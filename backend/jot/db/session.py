from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jot.core.config import get_settings

settings = get_settings()

# SQLite connections are shared across the request threadpool.
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
