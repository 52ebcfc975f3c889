"""Validación de la recepción de lotes nuevos."""

import datetime
from typing import Any, Optional

from vaxstock.core.exceptions import ValidationError
from vaxstock.utils.dates import to_date
from vaxstock.utils.validation import lot_number_error, normalize_lot_number


def _non_negative_int(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} debe ser un número entero: {value!r}")
    if value < 0:
        raise ValidationError(f"{label} no puede ser negativo: {value}")
    return value


def validate_receipt(data: dict[str, Any], as_of: Optional[datetime.date] = None) -> dict[str, Any]:
    """Comprueba un lote recibido y devuelve los datos listos para guardar.

    - Número de lote de al menos 3 caracteres (letras, números y guiones).
    - Caducidad no anterior a la fecha de referencia (`as_of`, hoy por defecto).
    - 0 <= disponibles <= recibidas y aprobadas + rechazadas == recibidas.

    Si no se indican las dosis disponibles se toman las aprobadas en la
    inspección; si no se indica la inspección, se aprueban todas.
    """
    reference_date = as_of or datetime.date.today()

    error = lot_number_error(data.get("lot_number"))
    if error:
        raise ValidationError(error)

    try:
        expiration_date = to_date(data.get("expiration_date"))
        date_received = to_date(data.get("date_received")) or reference_date
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Fecha no válida: {e}") from e
    if expiration_date is None:
        raise ValidationError("La fecha de caducidad es obligatoria")
    if expiration_date < reference_date:
        raise ValidationError("La fecha de caducidad no puede estar en el pasado")

    received = _non_negative_int(data.get("quantity_received"), "La cantidad recibida")

    failed = data.get("failed_inspection")
    failed = 0 if failed is None else _non_negative_int(failed, "Las dosis rechazadas")
    passed = data.get("passed_inspection")
    passed = received - failed if passed is None else _non_negative_int(passed, "Las dosis aprobadas")
    if passed + failed != received:
        raise ValidationError(
            f"Aprobadas ({passed}) + rechazadas ({failed}) debe ser igual a recibidas ({received})"
        )

    on_hand = data.get("quantity_on_hand")
    on_hand = passed if on_hand is None else _non_negative_int(on_hand, "La cantidad disponible")
    if on_hand > received:
        raise ValidationError(
            f"La cantidad disponible ({on_hand}) no puede superar la recibida ({received})"
        )

    return {
        "vaccine_id": data.get("vaccine_id"),
        "lot_number": normalize_lot_number(data.get("lot_number")),
        "expiration_date": expiration_date,
        "quantity_received": received,
        "quantity_on_hand": on_hand,
        "date_received": date_received,
        "passed_inspection": passed,
        "failed_inspection": failed,
        "discrepancy_reason": data.get("discrepancy_reason") or None,
    }
