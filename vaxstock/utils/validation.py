import re
import unicodedata
from typing import Any, Optional

LOT_NUMBER_PATTERN = re.compile(r"^[A-Z0-9-]+$")


def normalize_text(texto: Optional[str]) -> str:
    """Normaliza un texto para compararlo:
    - Elimina tildes
    - Pasa a minúsculas
    - Elimina espacios extra
    """
    if not texto:
        return ""
    texto = " ".join(texto.split())  # Elimina espacios
    texto = "".join(
        c for c in unicodedata.normalize("NFD", texto) if unicodedata.category(c) != "Mn"
    )  # Elimina tildes
    return texto.lower()


"""
unicodedata.normalize('NFD', texto) separa cada carácter acentuado en el
carácter base y la tilde; la categoría 'Mn' ("Mark, Nonspacing") identifica la
tilde, así que al filtrarla queda el texto sin acentos: "Sanofi Pastéur" y
"sanofi pasteur" se comparan como iguales.
"""


def normalize_lot_number(lot_number: Optional[str]) -> str:
    return (lot_number or "").strip().upper()


def lot_number_error(lot_number: Optional[str]) -> Optional[str]:
    """Devuelve el mensaje de error del número de lote, o None si es válido."""
    if not lot_number or lot_number.strip() == "":
        return "El número de lote es obligatorio"
    if len(lot_number.strip()) < 3:
        return "El número de lote debe tener al menos 3 caracteres"
    if not LOT_NUMBER_PATTERN.match(normalize_lot_number(lot_number)):
        return "El número de lote sólo puede contener letras, números y guiones"
    return None


def parse_positive_int(value: Any) -> Optional[int]:
    """Convierte un identificador (entero o texto numérico) a entero positivo.

    Devuelve None si no es convertible. Los booleanos no cuentan como enteros.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        parsed = int(value)
        return parsed if parsed > 0 else None
    return None
