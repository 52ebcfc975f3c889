"""Resolvedor de referencias lote → vacuna.

Garantiza que cada lote apunte a una vacuna existente, reparando las
referencias rotas con la cadena de estrategias de `matchers.py`. Es
idempotente: validar su propia salida no produce reparaciones ni incidencias
(salvo lotes que siguen sin poder resolverse, que se reportan igual).
"""

import datetime
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Sequence

from vaxstock.core.catalog import VaccineCatalog
from vaxstock.core.entities import Lot, Vaccine
from vaxstock.core.exceptions import LotReferenceError
from vaxstock.core.matchers import VaccineMatcher, default_matchers
from vaxstock.utils.validation import parse_positive_int

logger = logging.getLogger(__name__)

NORMALIZED_RULE = "normalized"


@dataclass(frozen=True)
class ReferenceRepair:
    """Reparación aplicada a un lote."""
    lot_id: int
    lot_number: str
    previous_vaccine_id: Any
    vaccine_id: int
    rule: str

    @property
    def is_normalization(self) -> bool:
        """Sólo cambió el tipo del id (texto → entero); no es un problema de integridad."""
        return self.rule == NORMALIZED_RULE


@dataclass
class ResolutionResult:
    repaired_lots: list[Lot] = field(default_factory=list)
    repairs: list[ReferenceRepair] = field(default_factory=list)
    issues: list[LotReferenceError] = field(default_factory=list)

    @property
    def unresolved_lot_ids(self) -> set[int]:
        return {issue.lot_id for issue in self.issues}

    def resolved_lots(self) -> list[Lot]:
        unresolved = self.unresolved_lot_ids
        return [lot for lot in self.repaired_lots if lot.id not in unresolved]

    def available_lots(self, as_of: datetime.date) -> list[Lot]:
        """Lotes aptos para administrar: referencia válida, con stock y sin caducar."""
        return [
            lot
            for lot in self.resolved_lots()
            if lot.quantity_on_hand > 0
            and lot.expiration_date is not None
            and lot.expiration_date > as_of
        ]


class ReferenceResolver:
    def __init__(self, matchers: Optional[Sequence[VaccineMatcher]] = None):
        self.matchers = list(matchers) if matchers is not None else default_matchers()

    def validate(self, lots: Iterable[Lot], vaccines: Iterable[Vaccine]) -> ResolutionResult:
        catalog = vaccines if isinstance(vaccines, VaccineCatalog) else VaccineCatalog(vaccines)
        result = ResolutionResult()

        for lot in lots:
            parsed_id = parse_positive_int(lot.vaccine_id)

            if parsed_id is not None and parsed_id in catalog:
                if lot.vaccine_id == parsed_id and isinstance(lot.vaccine_id, int):
                    result.repaired_lots.append(lot)
                else:
                    result.repaired_lots.append(replace(lot, vaccine_id=parsed_id))
                    result.repairs.append(
                        ReferenceRepair(
                            lot_id=lot.id,
                            lot_number=lot.lot_number,
                            previous_vaccine_id=lot.vaccine_id,
                            vaccine_id=parsed_id,
                            rule=NORMALIZED_RULE,
                        )
                    )
                continue

            reason = self._describe_problem(lot.vaccine_id, parsed_id)
            matched = self._match(lot, catalog)

            if matched is None:
                issue = LotReferenceError(
                    lot_id=lot.id,
                    lot_number=lot.lot_number,
                    vaccine_id=lot.vaccine_id,
                    reason=reason if len(catalog) else "catálogo de vacunas vacío",
                )
                logger.warning("Referencia sin resolver: %s", issue)
                result.issues.append(issue)
                result.repaired_lots.append(lot)
                continue

            vaccine_id, rule = matched
            repair = ReferenceRepair(
                lot_id=lot.id,
                lot_number=lot.lot_number,
                previous_vaccine_id=lot.vaccine_id,
                vaccine_id=vaccine_id,
                rule=rule,
            )
            logger.info(
                "Lote %s (%s) reparado: vacuna %r -> %s [%s, %s]",
                lot.id,
                lot.lot_number,
                lot.vaccine_id,
                vaccine_id,
                rule,
                reason,
            )
            result.repairs.append(repair)
            result.repaired_lots.append(replace(lot, vaccine_id=vaccine_id))

        return result

    def _match(self, lot: Lot, catalog: VaccineCatalog) -> Optional[tuple[int, str]]:
        for matcher in self.matchers:
            vaccine_id = matcher.try_match(lot, catalog)
            if vaccine_id is not None and vaccine_id in catalog:
                return vaccine_id, matcher.rule
        return None

    @staticmethod
    def _describe_problem(raw_id: Any, parsed_id: Optional[int]) -> str:
        if raw_id is None or (isinstance(raw_id, str) and raw_id.strip() == ""):
            return "sin vacuna asignada"
        if parsed_id is None:
            return "id de vacuna inválido"
        return "vacuna inexistente"
