#!/usr/bin/env python3
"""
Wait for the database, run migrations (same DATABASE_URL as the app), then uvicorn.
Ensures the tickets table and its unique indexes exist before the first registration.
"""
import os
import sys

from app.core.config import settings

# 1) Wait for DB
if settings.DATABASE_URL.startswith("postgresql"):
    from wait_for_db import wait_for_db
    wait_for_db(settings.DATABASE_URL)

# 2) Run migrations using the same settings as the app
from alembic.config import Config
from alembic import command

alembic_cfg = Config(os.path.join(os.path.dirname(__file__), "alembic.ini"))
alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
command.upgrade(alembic_cfg, "head")

# 3) Start uvicorn (replace current process). --proxy-headers so rate limiting sees the caller address.
port = os.getenv("PORT", "5000")
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", port,
     "--proxy-headers", "--forwarded-allow-ips", "*"],
)
