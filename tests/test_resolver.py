import datetime

from vaxstock.core.entities import Vaccine
from vaxstock.core.matchers import (
    FirstVaccineMatcher,
    ManufacturerLotPatternMatcher,
    PreferredFamilyMatcher,
)
from vaxstock.core.resolver import ReferenceResolver

from factories import AS_OF, make_lot


def full_chain(family=""):
    return ReferenceResolver(
        [ManufacturerLotPatternMatcher(), PreferredFamilyMatcher(family), FirstVaccineMatcher()]
    )


class TestReferenceResolver:
    def test_valid_references_are_untouched(self, vaccines):
        lots = [make_lot(1, vaccine_id=1), make_lot(2, vaccine_id=3)]
        result = full_chain().validate(lots, vaccines)
        assert result.repaired_lots == lots
        assert result.repairs == []
        assert result.issues == []

    def test_textual_id_is_normalized_not_reported(self, vaccines):
        result = full_chain().validate([make_lot(1, vaccine_id=" 2 ")], vaccines)
        assert result.repaired_lots[0].vaccine_id == 2
        assert [r.rule for r in result.repairs] == ["normalized"]
        assert result.repairs[0].is_normalization
        assert result.issues == []

    def test_manufacturer_lot_pattern(self, vaccines):
        lot = make_lot(1, vaccine_id=None, lot_number="fa1234")
        result = full_chain().validate([lot], vaccines)
        repair = result.repairs[0]
        assert repair.rule == "manufacturer-lot-pattern"
        assert repair.vaccine_id == 1
        assert repair.previous_vaccine_id is None
        assert result.repaired_lots[0].vaccine_id == 1

    def test_pattern_without_manufacturer_in_catalog_falls_through(self):
        catalog = [Vaccine(id=7, name="Vaxelis", family="Hexavalente", manufacturer="MCM")]
        lot = make_lot(1, vaccine_id=None, lot_number="FA1234")
        result = full_chain().validate([lot], catalog)
        assert result.repairs[0].rule == "preferred-family"
        assert result.repairs[0].vaccine_id == 7

    def test_most_common_family_when_not_configured(self, vaccines):
        lot = make_lot(1, vaccine_id=99, lot_number="ZZZ")
        result = full_chain().validate([lot], vaccines)
        assert result.repairs[0].rule == "preferred-family"
        # COVID-19 es la familia con más vacunas; se elige la de menor id
        assert result.repairs[0].vaccine_id == 1

    def test_configured_preferred_family(self, vaccines):
        lot = make_lot(1, vaccine_id="abc", lot_number="ZZZ")
        result = full_chain("hepatitis b").validate([lot], vaccines)
        assert result.repairs[0].vaccine_id == 3

    def test_first_vaccine_as_last_resort(self):
        catalog = [Vaccine(id=5, name="Sin familia A"), Vaccine(id=3, name="Sin familia B")]
        result = full_chain().validate([make_lot(1, vaccine_id=None, lot_number="ZZZ")], catalog)
        assert result.repairs[0].rule == "first-vaccine"
        assert result.repairs[0].vaccine_id == 3

    def test_unresolved_when_no_matcher_fires(self, vaccines):
        resolver = ReferenceResolver([ManufacturerLotPatternMatcher()])
        lot = make_lot(1, vaccine_id=99, lot_number="ZZZ")
        result = resolver.validate([lot], vaccines)
        assert result.repairs == []
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert (issue.lot_id, issue.vaccine_id, issue.reason) == (1, 99, "vacuna inexistente")
        # El lote se conserva pero no está disponible
        assert result.repaired_lots == [lot]
        assert result.available_lots(AS_OF) == []

    def test_empty_catalog(self):
        lot = make_lot(1, vaccine_id=1)
        result = full_chain().validate([lot], [])
        assert result.issues[0].reason == "catálogo de vacunas vacío"
        assert result.repaired_lots == [lot]

    def test_totality(self, vaccines):
        lots = [
            make_lot(1, vaccine_id=1),
            make_lot(2, vaccine_id="3"),
            make_lot(3, vaccine_id=None, lot_number="EW0182"),
            make_lot(4, vaccine_id=0, lot_number="ZZZ"),
        ]
        result = full_chain().validate(lots, vaccines)
        catalog_ids = {v.id for v in vaccines}
        assert len(result.repaired_lots) == len(lots)
        for lot in result.repaired_lots:
            assert lot.vaccine_id in catalog_ids or lot.id in result.unresolved_lot_ids

    def test_idempotence(self, vaccines):
        lots = [
            make_lot(1, vaccine_id="2"),
            make_lot(2, vaccine_id=None, lot_number="UA123BC"),
            make_lot(3, vaccine_id=42, lot_number="ZZZ"),
        ]
        resolver = full_chain()
        first = resolver.validate(lots, vaccines)
        assert first.issues == []
        second = resolver.validate(first.repaired_lots, vaccines)
        assert second.repairs == []
        assert second.issues == []
        assert second.repaired_lots == first.repaired_lots

    def test_available_lots_view(self, vaccines):
        lots = [
            make_lot(1, quantity=10),
            make_lot(2, quantity=0),
            make_lot(3, quantity=10, expiration=AS_OF),
            make_lot(4, quantity=10, expiration=AS_OF - datetime.timedelta(days=1)),
        ]
        result = full_chain().validate(lots, vaccines)
        assert [lot.id for lot in result.available_lots(AS_OF)] == [1]
