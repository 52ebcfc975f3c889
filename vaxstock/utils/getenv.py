from dotenv import (
    load_dotenv,
)  # Para cargar variables de entorno desde un archivo .env.
import os  # Para acceder a variables de entorno.

load_dotenv()


def get_required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise Exception(f"Env var {name} is required but not found.")
    return value


def get_int_env(name: str, default: int) -> int:
    """Lee una variable entera; si no existe devuelve el valor por defecto."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise Exception(f"Env var {name} must be an integer, got {value!r}.")


def get_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "si", "sí")


def get_list_env(name: str, default: list[str]) -> list[str]:
    """Lista separada por comas (ej. CORS_ORIGINS)."""
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]
