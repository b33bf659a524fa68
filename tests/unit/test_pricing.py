"""Tests for cx_pricing.domain.integrity — pure scoring and pricing."""

from types import SimpleNamespace

import pytest

from src.cx_common.enums import ProjectType
from src.cx_pricing.domain.integrity import (
    FALLBACK_QUOTE,
    MRV_MAX,
    MRV_MIN,
    additionality_score,
    evaluate,
    integrity_score,
    permanence_score,
    unit_price_cents,
)


def _project(
    project_type: object = "REFORESTATION", vintage_year: object = 2024, mrv_score: object = 90
) -> SimpleNamespace:
    return SimpleNamespace(
        project_type=project_type, vintage_year=vintage_year, mrv_score=mrv_score
    )


class TestComponentScores:
    @pytest.mark.parametrize(
        ("project_type", "expected"),
        [
            ("REFORESTATION", 98),
            ("RENEWABLE_ENERGY", 70),
            ("SOLAR", 70),
            ("WIND", 70),
            ("GEOTHERMAL", 70),
            ("HYDROELECTRIC", 70),
            ("METHANE_CAPTURE", 75),
            ("DIRECT_AIR_CAPTURE", 75),
        ],
    )
    def test_additionality(self, project_type: str, expected: int) -> None:
        assert additionality_score(project_type) == expected

    @pytest.mark.parametrize(
        ("project_type", "expected"),
        [
            ("DIRECT_AIR_CAPTURE", 95),
            ("GEOTHERMAL", 95),
            ("METHANE_CAPTURE", 95),
            ("REFORESTATION", 85),
            ("BLUE_CARBON", 75),
        ],
    )
    def test_permanence(self, project_type: str, expected: int) -> None:
        assert permanence_score(project_type) == expected


class TestIntegrityScore:
    def test_weighted_round(self) -> None:
        # 98*.4 + 85*.3 + 90*.3 = 91.7
        assert integrity_score(98, 85, 90) == 92

    def test_half_rounds_up(self) -> None:
        # 1*.4 + 7*.3 + 0*.3 = 2.5
        assert integrity_score(1, 7, 0) == 3

    def test_clamped(self) -> None:
        assert integrity_score(100, 100, 100) == 100
        assert integrity_score(0, 0, 0) == 0


class TestUnitPrice:
    def test_no_premium_at_threshold(self) -> None:
        assert unit_price_cents("WIND", 80, 2026, 2026) == 1400

    def test_premium_and_vintage_bonus(self) -> None:
        assert unit_price_cents("METHANE_CAPTURE", 86, 2020, 2026) == 1800 + 300 + 600

    def test_future_vintage_has_no_bonus(self) -> None:
        assert unit_price_cents("SOLAR", 70, 2030, 2026) == 1200

    def test_unknown_type_uses_default_base(self) -> None:
        assert unit_price_cents("DIRECT_AIR_CAPTURE", 80, 2026, 2026) == 1500


class TestEvaluate:
    def test_reforestation_scenario(self) -> None:
        quote = evaluate(_project(), reference_year=2026)
        assert quote.integrity_score == 92
        assert quote.unit_price_cents == 3600
        assert quote.additionality_score == 98
        assert quote.permanence_score == 85
        assert quote.mrv_score == 90
        assert quote.is_fallback is False

    def test_accepts_enum_member(self) -> None:
        quote = evaluate(_project(project_type=ProjectType.REFORESTATION), reference_year=2026)
        assert quote.unit_price_cents == 3600

    def test_renewable_half_point_rounds_up(self) -> None:
        # 70*.4 + 95*.3 + 90*.3 = 83.5
        quote = evaluate(
            _project(project_type="RENEWABLE_ENERGY", vintage_year=2026), reference_year=2026
        )
        assert quote.integrity_score == 84
        assert quote.unit_price_cents == 1200 + 4 * 50

    def test_deterministic(self) -> None:
        assert evaluate(_project(), 2026) == evaluate(_project(), 2026)

    def test_default_reference_year_from_settings(self) -> None:
        assert evaluate(_project()).unit_price_cents == 3600

    @pytest.mark.parametrize("mrv", [None, MRV_MIN - 1, MRV_MAX + 1])
    def test_out_of_range_mrv_falls_back(self, mrv: int | None) -> None:
        assert evaluate(_project(mrv_score=mrv)) == FALLBACK_QUOTE

    def test_bad_type_falls_back(self) -> None:
        quote = evaluate(_project(project_type=42))
        assert quote.is_fallback
        assert quote.integrity_score == 75
        assert quote.unit_price_cents == 1500

    def test_bad_vintage_falls_back(self) -> None:
        assert evaluate(_project(vintage_year="twenty")) == FALLBACK_QUOTE

    def test_price_monotonic_in_mrv(self) -> None:
        prices = [
            evaluate(_project(mrv_score=m), 2026).unit_price_cents
            for m in range(MRV_MIN, MRV_MAX + 1)
        ]
        assert prices == sorted(prices)
        assert all(0 <= evaluate(_project(mrv_score=m)).integrity_score <= 100
                   for m in range(MRV_MIN, MRV_MAX + 1))
