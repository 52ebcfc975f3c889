from sqlmodel import SQLModel, create_engine
from vaxstock.config import settings
from vaxstock.utils.getenv import get_required_env

# Conectar a la base de datos existente
DATABASE_URL = get_required_env("DATABASE_URL")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=settings.SQL_ECHO, connect_args=connect_args)


def create_db_and_tables(bind=None):
    # Registra las tablas en los metadatos antes de crearlas
    from vaxstock.models import (  # noqa: F401
        administration,
        alert_threshold,
        lot,
        reconciliation,
        vaccine,
    )

    SQLModel.metadata.create_all(bind or engine)
