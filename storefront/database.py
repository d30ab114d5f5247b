from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import settings
from storefront.utils.logger import get_logger
from storefront.exceptions import DatabaseError, handle_database_error

logger = get_logger("database")

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Checks connection health before using
        "pool_size": 20,        # Number of connections to keep open
        "max_overflow": 30,     # Number of connections beyond pool_size allowed
    }


try:
    engine = create_engine(SQLALCHEMY_DATABASE_URL, **_engine_options(SQLALCHEMY_DATABASE_URL))
    logger.info("Database engine created successfully")
except Exception as e:
    logger.error(f"Failed to create database engine: {str(e)}", exc_info=True)
    raise DatabaseError("Failed to initialize database connection", details={"original_error": str(e)})

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Database dependency that provides a database session

    Yields:
        Session: Database session

    Raises:
        DatabaseError: If database connection fails
    """
    db = SessionLocal()
    try:
        logger.debug("Database session created")
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Database session error: {str(e)}", exc_info=True)
        db.rollback()
        raise handle_database_error(e, "database session")
    finally:
        db.close()
        logger.debug("Database session closed")


def test_database_connection(db=None) -> bool:
    """
    Test database connection

    Returns:
        bool: True if connection successful, False otherwise
    """
    session = db or SessionLocal()
    try:
        session.execute(text("SELECT 1"))
        logger.info("Database connection test successful")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection test failed: {str(e)}", exc_info=True)
        return False
    finally:
        if db is None:
            session.close()
