import importlib
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

# SQLite needs check_same_thread, Postgres must NOT have it
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# add new model modules here so their tables land in Base.metadata
MODEL_MODULES = [
    "storefront.models.product",
    "storefront.models.category",
    "storefront.models.product_size",
    "storefront.models.system_log",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    Behavior:
      - If reset is True (or RESET_DB is set), drop & recreate tables.
      - Otherwise, leave existing tables in place and create missing ones.

    All model modules are imported first so metadata is populated.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset or settings.RESET_DB:
        logger.info("Resetting database schema")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized (%s tables)", len(Base.metadata.tables))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
