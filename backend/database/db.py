from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from config.settings import settings
import logging

logger = logging.getLogger(__name__)

def build_engine(database_url: str):
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite needs check_same_thread disabled because FastAPI serves sync
    routes from a threadpool; other backends get a bounded connection pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    return create_engine(
        database_url,
        echo=False,  # Set to True for SQL query logging
        pool_size=20,
        max_overflow=0,
        pool_pre_ping=True,  # Test connections before using
    )

# Create database engine
engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)

# Base class for all database models
Base = declarative_base()

def get_db() -> Session:
    """
    Dependency function to get database session.
    Used in FastAPI route handlers.

    Example:
        @router.get("/profile")
        def profile(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()

def init_db(bind=None):
    """
    Initialize database tables.
    Call this once at application startup.

    Creates the employees and login_attempts tables (with their unique
    constraints and indexes) if they do not exist yet.
    """
    try:
        # Import all models to register them with Base
        from models.employee import Employee
        from models.login_attempt import LoginAttempt

        # Create all tables
        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Database tables initialized successfully")
    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {str(e)}")
        raise

def drop_all_tables(bind=None):
    """
    Drop all database tables.
    WARNING: This will delete all data. Use only in development!
    """
    try:
        Base.metadata.drop_all(bind=bind or engine)
        logger.warning("⚠️ All database tables dropped")
    except Exception as e:
        logger.error(f"❌ Failed to drop tables: {str(e)}")
        raise

def reset_db(bind=None):
    """
    Reset database: drop all tables and recreate them.
    WARNING: This will delete all data. Use only in development!
    """
    drop_all_tables(bind)
    init_db(bind)
    logger.info("✅ Database reset completed")
