from collections import Counter
from typing import Iterable, Optional

from vaxstock.core.entities import Vaccine
from vaxstock.utils.validation import normalize_text


class VaccineCatalog:
    """Catálogo de vacunas de sólo lectura, ordenado por id."""

    def __init__(self, vaccines: Iterable[Vaccine]):
        self._vaccines: list[Vaccine] = sorted(vaccines, key=lambda v: v.id)
        self._by_id: dict[int, Vaccine] = {v.id: v for v in self._vaccines}

    def __len__(self) -> int:
        return len(self._vaccines)

    def __iter__(self):
        return iter(self._vaccines)

    def __contains__(self, vaccine_id) -> bool:
        return vaccine_id in self._by_id

    def get(self, vaccine_id: int) -> Optional[Vaccine]:
        return self._by_id.get(vaccine_id)

    def name_of(self, vaccine_id) -> str:
        vaccine = self._by_id.get(vaccine_id)
        return vaccine.name if vaccine else "Desconocida"

    def first(self) -> Optional[Vaccine]:
        return self._vaccines[0] if self._vaccines else None

    def by_manufacturer(self, manufacturer: str) -> list[Vaccine]:
        """Vacunas cuyo fabricante contiene el texto dado (sin tildes ni mayúsculas)."""
        wanted = normalize_text(manufacturer)
        if not wanted:
            return []
        return [v for v in self._vaccines if wanted in normalize_text(v.manufacturer)]

    def by_family(self, family: str) -> list[Vaccine]:
        wanted = normalize_text(family)
        return [v for v in self._vaccines if wanted and normalize_text(v.family) == wanted]

    def most_common_family(self) -> Optional[str]:
        """Familia con más vacunas; empate por nombre de familia."""
        counts = Counter(
            normalize_text(v.family) for v in self._vaccines if normalize_text(v.family)
        )
        if not counts:
            return None
        return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]
