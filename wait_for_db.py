import os
import time
from urllib.parse import urlparse

import psycopg2


def wait_for_db(database_url: str, timeout_s: int | None = None) -> None:
    """Block until Postgres accepts connections, or raise after DB_WAIT_TIMEOUT seconds."""
    # SQLAlchemy URL may start with postgresql+psycopg2://
    url = database_url.replace("postgresql+psycopg2://", "postgresql://")
    p = urlparse(url)
    host = p.hostname or "db"
    port = p.port or 5432
    dbname = (p.path or "/thm25").lstrip("/") or "thm25"
    if timeout_s is None:
        timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))

    start = time.time()
    print(f"[wait_for_db] Waiting for Postgres at {host}:{port} db={dbname} (timeout={timeout_s}s)")
    while True:
        try:
            conn = psycopg2.connect(url, connect_timeout=5)
            conn.close()
            print("[wait_for_db] Postgres is ready.")
            return
        except psycopg2.OperationalError as e:
            if time.time() - start > timeout_s:
                print(f"[wait_for_db] Timed out waiting for DB. Last error: {e.__class__.__name__}")
                raise
            time.sleep(1)


if __name__ == "__main__":
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL is not set")
    wait_for_db(db_url)
