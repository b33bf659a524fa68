"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class ProjectType(str, Enum):
    REFORESTATION = "REFORESTATION"
    RENEWABLE_ENERGY = "RENEWABLE_ENERGY"
    METHANE_CAPTURE = "METHANE_CAPTURE"
    DIRECT_AIR_CAPTURE = "DIRECT_AIR_CAPTURE"
    GEOTHERMAL = "GEOTHERMAL"
    HYDROELECTRIC = "HYDROELECTRIC"


class ProjectStatus(str, Enum):
    UNDER_VALIDATION = "UNDER_VALIDATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class ReviewOutcome(str, Enum):
    """Decisions a reviewer may take; both are terminal project states."""
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class LedgerAction(str, Enum):
    ISSUED = "ISSUED"
    LISTED = "LISTED"
    SOLD = "SOLD"
    RETIRED = "RETIRED"
    TRANSFERRED = "TRANSFERRED"
