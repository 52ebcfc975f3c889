"""Configuración de la aplicación leída de variables de entorno (.env)."""

import json
import os

from vaxstock.utils.getenv import get_bool_env, get_int_env, get_list_env

# Prefijos de lote característicos de cada fabricante. Se evalúan en este orden.
DEFAULT_LOT_PATTERNS: dict[str, list[str]] = {
    "pfizer": [r"^[EFG][A-Z]\d{4}"],
    "moderna": [r"^\d{3}[A-Z]\d{2}[A-Z]$", r"^\d{6}$"],
    "merck": [r"^[RSTUVWXY]\d{6}$", r"^\d{4}[A-Z]{3}$"],
    "sanofi": [r"^U[A-Z]\d{3}[A-Z]{2}$", r"^[CU]\d{4}[A-Z]{2}$"],
    "gsk": [r"^AC\d{2}B\d{3}[A-Z]{2}$", r"^[2-9][A-Z0-9]{2}[A-Z]{2}$"],
}


def _load_lot_patterns() -> dict[str, list[str]]:
    raw = os.getenv("LOT_PATTERNS")
    if not raw:
        return DEFAULT_LOT_PATTERNS
    try:
        patterns = json.loads(raw)
    except json.JSONDecodeError:
        raise Exception("Env var LOT_PATTERNS must be a JSON object.")
    if not isinstance(patterns, dict):
        raise Exception("Env var LOT_PATTERNS must be a JSON object.")
    return {
        str(manufacturer): [str(p) for p in (regexes or [])]
        for manufacturer, regexes in patterns.items()
    }


class Settings:
    """Configuración de la aplicación."""

    # Base de datos (DATABASE_URL se lee en models/database.py)
    SQL_ECHO: bool = get_bool_env("SQL_ECHO", False)

    # CORS
    CORS_ORIGINS: list[str] = get_list_env(
        "CORS_ORIGINS", ["http://localhost:5173", "http://localhost:3000"]
    )

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Umbrales por defecto cuando la vacuna no tiene uno configurado
    DEFAULT_LOW_STOCK_THRESHOLD: int = get_int_env("DEFAULT_LOW_STOCK_THRESHOLD", 10)
    DEFAULT_EXPIRATION_DAYS: int = get_int_env("DEFAULT_EXPIRATION_DAYS", 30)

    # Reparación de referencias de lotes
    FALLBACK_VACCINE_FAMILY: str | None = os.getenv("FALLBACK_VACCINE_FAMILY") or None
    REPAIR_LAST_RESORT: bool = get_bool_env("REPAIR_LAST_RESORT", True)
    LOT_PATTERNS: dict[str, list[str]] = _load_lot_patterns()


settings = Settings()
