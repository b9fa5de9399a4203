# eduauth/db/bootstrap.py
import os
from alembic import command
from alembic.config import Config

from eduauth.db.session import SessionLocal
from eduauth.db.init_db import init_db

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

def alembic_config() -> Config:
    # Aponta explicitamente para alembic.ini e migrations/
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    return cfg

def run_migrations_and_seed() -> None:
    # Aplica todas as migrações
    command.upgrade(alembic_config(), "head")

    # Roda o seed
    with SessionLocal() as db:
        init_db(db)
