from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from taskdesk.config import DATABASE_URL

# Only apply sqlite-specific connect_args when using sqlite
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Enable pool_pre_ping to avoid stale connections (useful for cloud DBs like Neon)
engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
)

if DATABASE_URL.startswith("sqlite"):
    # SQLite ignores REFERENCES clauses unless asked per connection
    @event.listens_for(engine, "connect")
    def _enable_sqlite_fks(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# largest value an INTEGER primary key can hold
MAX_ID = 2**63 - 1

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
