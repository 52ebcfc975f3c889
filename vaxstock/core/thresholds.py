import logging
from typing import Iterable, Optional, Union

from vaxstock.config import settings
from vaxstock.core.entities import AlertThreshold, ThresholdType
from vaxstock.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def parse_threshold_type(value: Union[ThresholdType, str]) -> ThresholdType:
    try:
        return ThresholdType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ThresholdType)
        raise ValidationError(f"Tipo de umbral desconocido: {value!r} (admitidos: {allowed})")


class ThresholdStore:
    """Resuelve el umbral efectivo de una vacuna para un tipo de alerta.

    Sólo cuenta el primer umbral de cada (vacuna, tipo); un valor no positivo
    se trata como no configurado y se usa el valor por defecto del sistema.
    """

    def __init__(
        self,
        thresholds: Iterable[AlertThreshold] = (),
        default_low_stock: Optional[int] = None,
        default_expiration_days: Optional[int] = None,
    ):
        self.defaults = {
            ThresholdType.LOW_STOCK: (
                default_low_stock
                if default_low_stock is not None
                else settings.DEFAULT_LOW_STOCK_THRESHOLD
            ),
            ThresholdType.EXPIRATION: (
                default_expiration_days
                if default_expiration_days is not None
                else settings.DEFAULT_EXPIRATION_DAYS
            ),
        }
        self._values: dict[tuple[int, ThresholdType], float] = {}
        seen: set[tuple[int, ThresholdType]] = set()

        for threshold in thresholds:
            key = (threshold.vaccine_id, ThresholdType(threshold.threshold_type))
            if key in seen:
                continue
            seen.add(key)
            if threshold.threshold_value is None or threshold.threshold_value <= 0:
                logger.warning(
                    "Umbral %s de la vacuna %s con valor no positivo (%s); se usa el valor por defecto %s",
                    key[1].value,
                    threshold.vaccine_id,
                    threshold.threshold_value,
                    self.defaults[key[1]],
                )
                continue
            self._values[key] = threshold.threshold_value

    def get(self, vaccine_id: int, threshold_type: Union[ThresholdType, str]) -> float:
        threshold_type = ThresholdType(threshold_type)
        return self._values.get((vaccine_id, threshold_type), self.defaults[threshold_type])

    def low_stock(self, vaccine_id: int) -> float:
        return self.get(vaccine_id, ThresholdType.LOW_STOCK)

    def expiration_days(self, vaccine_id: int) -> float:
        return self.get(vaccine_id, ThresholdType.EXPIRATION)
