"""Estrategias para reasignar un lote huérfano a una vacuna del catálogo.

Cada estrategia implementa `try_match(lot, catalog)` y devuelve el id de la
vacuna elegida o None. El resolvedor las evalúa en orden de prioridad.
"""

import logging
import re
from typing import Optional, Protocol

from vaxstock.config import settings
from vaxstock.core.catalog import VaccineCatalog
from vaxstock.core.entities import Lot
from vaxstock.utils.validation import normalize_lot_number

logger = logging.getLogger(__name__)


class VaccineMatcher(Protocol):
    rule: str

    def try_match(self, lot: Lot, catalog: VaccineCatalog) -> Optional[int]:
        ...


class ManufacturerLotPatternMatcher:
    """Reconoce el fabricante por el formato del número de lote."""

    rule = "manufacturer-lot-pattern"

    def __init__(self, patterns: Optional[dict[str, list[str]]] = None):
        patterns = settings.LOT_PATTERNS if patterns is None else patterns
        self.patterns: list[tuple[str, re.Pattern]] = []
        for manufacturer, regexes in patterns.items():
            for regex in regexes:
                try:
                    self.patterns.append((manufacturer, re.compile(regex)))
                except re.error:
                    logger.warning(
                        "Patrón de lote inválido para %s: %r (se ignora)", manufacturer, regex
                    )

    def try_match(self, lot: Lot, catalog: VaccineCatalog) -> Optional[int]:
        lot_number = normalize_lot_number(lot.lot_number)
        if not lot_number:
            return None
        for manufacturer, pattern in self.patterns:
            if pattern.match(lot_number):
                candidates = catalog.by_manufacturer(manufacturer)
                if candidates:
                    return candidates[0].id
        return None


class PreferredFamilyMatcher:
    """Asigna la familia preferida de la instalación (o la más común del catálogo)."""

    rule = "preferred-family"

    def __init__(self, family: Optional[str] = None):
        self.family = family if family is not None else settings.FALLBACK_VACCINE_FAMILY

    def try_match(self, lot: Lot, catalog: VaccineCatalog) -> Optional[int]:
        family = self.family or catalog.most_common_family()
        if not family:
            return None
        candidates = catalog.by_family(family)
        return candidates[0].id if candidates else None


class FirstVaccineMatcher:
    """Último recurso: la primera vacuna del catálogo."""

    rule = "first-vaccine"

    def try_match(self, lot: Lot, catalog: VaccineCatalog) -> Optional[int]:
        first = catalog.first()
        return first.id if first else None


def default_matchers() -> list[VaccineMatcher]:
    """Cadena de estrategias según la configuración."""
    matchers: list[VaccineMatcher] = [
        ManufacturerLotPatternMatcher(),
        PreferredFamilyMatcher(),
    ]
    # TODO: confirmar con los responsables de producto si esta regla debe seguir activa por defecto
    if settings.REPAIR_LAST_RESORT:
        matchers.append(FirstVaccineMatcher())
    return matchers
