from jobintake.db.session import engine
from jobintake.db.base import Base


def init_db(bind=None):
    """Create tables for local development; production uses the Alembic migrations."""
    import jobintake.db.models  # noqa: F401 - registers models on Base.metadata

    Base.metadata.create_all(bind=bind or engine)
