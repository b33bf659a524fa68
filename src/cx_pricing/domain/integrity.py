"""Pricing & integrity engine — pure integer arithmetic, no I/O.

integrity = round_half_up(0.40 * additionality + 0.30 * permanence + 0.30 * mrv)
price     = base + 50c per integrity point above 80 + 100c per year of vintage
            before the reference year

Weights are kept in percent and prices in cents so every step stays exact.
Any failure falls back to FALLBACK_QUOTE: pricing must never block approval.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from config.settings import settings

logger = logging.getLogger(__name__)

# Project type keys. SOLAR and WIND are legacy sub-types of renewable energy
# that still appear on older submissions.
REFORESTATION = "REFORESTATION"
RENEWABLE_ENERGY = "RENEWABLE_ENERGY"
SOLAR = "SOLAR"
WIND = "WIND"
GEOTHERMAL = "GEOTHERMAL"
HYDROELECTRIC = "HYDROELECTRIC"
METHANE_CAPTURE = "METHANE_CAPTURE"
DIRECT_AIR_CAPTURE = "DIRECT_AIR_CAPTURE"

_RENEWABLES = frozenset({RENEWABLE_ENERGY, SOLAR, WIND, GEOTHERMAL, HYDROELECTRIC})
_TECH_BASED = frozenset(
    {DIRECT_AIR_CAPTURE, GEOTHERMAL, RENEWABLE_ENERGY, SOLAR, WIND, HYDROELECTRIC, METHANE_CAPTURE}
)

ADDITIONALITY_WEIGHT_PCT = 40
PERMANENCE_WEIGHT_PCT = 30
MRV_WEIGHT_PCT = 30

MRV_MIN = 88
MRV_MAX = 96

_BASE_PRICE_CENTS: dict[str, int] = {
    REFORESTATION: 2800,
    METHANE_CAPTURE: 1800,
    SOLAR: 1200,
    RENEWABLE_ENERGY: 1200,
    WIND: 1400,
}
DEFAULT_BASE_PRICE_CENTS = 1500

PREMIUM_THRESHOLD = 80
PREMIUM_PER_POINT_CENTS = 50
VINTAGE_BONUS_PER_YEAR_CENTS = 100


class PricedProject(Protocol):
    project_type: str
    vintage_year: int
    mrv_score: int | None


@dataclass(frozen=True)
class IntegrityQuote:
    integrity_score: int        # 0..100
    unit_price_cents: int
    additionality_score: int
    permanence_score: int
    mrv_score: int
    is_fallback: bool = False


FALLBACK_QUOTE = IntegrityQuote(
    integrity_score=75,
    unit_price_cents=1500,
    additionality_score=0,
    permanence_score=0,
    mrv_score=0,
    is_fallback=True,
)


def _type_key(project_type: object) -> str:
    # Accepts ProjectType members as well as plain strings.
    value = getattr(project_type, "value", project_type)
    if not isinstance(value, str):
        raise TypeError(f"project_type must be a string, got {type(value).__name__}")
    return value.upper()


def additionality_score(project_type: str) -> int:
    if project_type == REFORESTATION:
        return 98
    if project_type in _RENEWABLES:
        return 70
    return 75


def permanence_score(project_type: str) -> int:
    if project_type in _TECH_BASED:
        return 95
    if project_type == REFORESTATION:
        return 85
    return 75


def integrity_score(additionality: int, permanence: int, mrv: int) -> int:
    weighted = (
        additionality * ADDITIONALITY_WEIGHT_PCT
        + permanence * PERMANENCE_WEIGHT_PCT
        + mrv * MRV_WEIGHT_PCT
    )
    score = (weighted + 50) // 100
    return max(0, min(100, score))


def unit_price_cents(
    project_type: str, score: int, vintage_year: int, reference_year: int
) -> int:
    base = _BASE_PRICE_CENTS.get(project_type, DEFAULT_BASE_PRICE_CENTS)
    premium = max(0, score - PREMIUM_THRESHOLD) * PREMIUM_PER_POINT_CENTS
    vintage_bonus = max(0, reference_year - vintage_year) * VINTAGE_BONUS_PER_YEAR_CENTS
    return base + premium + vintage_bonus


def evaluate(project: PricedProject, reference_year: int | None = None) -> IntegrityQuote:
    """Score and price a project. Never raises."""
    ref_year = reference_year if reference_year is not None else settings.PRICING_REFERENCE_YEAR
    try:
        type_key = _type_key(project.project_type)
        mrv = project.mrv_score
        if mrv is None or not (MRV_MIN <= int(mrv) <= MRV_MAX):
            raise ValueError(f"mrv_score must be within [{MRV_MIN}, {MRV_MAX}], got {mrv}")
        mrv = int(mrv)
        vintage = int(project.vintage_year)

        additionality = additionality_score(type_key)
        permanence = permanence_score(type_key)
        score = integrity_score(additionality, permanence, mrv)
        return IntegrityQuote(
            integrity_score=score,
            unit_price_cents=unit_price_cents(type_key, score, vintage, ref_year),
            additionality_score=additionality,
            permanence_score=permanence,
            mrv_score=mrv,
        )
    except Exception:
        logger.exception(
            "Pricing failed for project type=%r vintage=%r, using fallback quote",
            getattr(project, "project_type", None),
            getattr(project, "vintage_year", None),
        )
        return FALLBACK_QUOTE
