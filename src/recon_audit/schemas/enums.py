"""Enumerations shared across case, lifecycle, and storage code."""

from enum import Enum


class InspectionType(str, Enum):
    """Which inspection standard(s) the vehicle was checked against."""

    ONTARIO_SAFETY = "Ontario Safety"
    CPO = "Certified Pre-Owned"
    BOTH = "Both"


class InventoryProgram(str, Enum):
    """Program selected for a vehicle at intake."""

    HCUV = "HCUV"
    HAPO = "HAPO"
    CERTIFIED = "Certified"


class PostReviewStatus(str, Enum):
    """Lifecycle status of a reviewed case.

    Each status carries a unique rank taken from its position in
    _STATUS_RANK_ORDER. Rank is only used to classify transitions; it has
    no bearing on eligibility.
    """

    HCUV = "HCUV"
    HAPO = "HAPO"
    CERTIFIED = "Certified"
    WHOLESALE = "Wholesale"
    AS_IS_RETAIL = "As-Is Retail"

    @property
    def rank(self) -> int:
        return _STATUS_RANK_ORDER.index(self)

    @classmethod
    def from_program(cls, program: "InventoryProgram") -> "PostReviewStatus":
        return cls(InventoryProgram(program).value)


# Lowest to highest. A status appears exactly once, so ranks cannot collide.
_STATUS_RANK_ORDER = (
    PostReviewStatus.WHOLESALE,
    PostReviewStatus.AS_IS_RETAIL,
    PostReviewStatus.CERTIFIED,
    PostReviewStatus.HAPO,
    PostReviewStatus.HCUV,
)

if set(_STATUS_RANK_ORDER) != set(PostReviewStatus) or len(_STATUS_RANK_ORDER) != len(PostReviewStatus):
    raise RuntimeError("Every PostReviewStatus must appear exactly once in the rank order")


class TransitionType(str, Enum):
    """Classification of a status change."""

    UPGRADE = "Upgrade"
    DOWNGRADE = "Downgrade"
    LATERAL = "Lateral"


class OutcomeStatus(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"
    CONDITIONAL = "Conditional"


class AnalysisMode(str, Enum):
    AUDIT = "Audit Mode"
    APPRAISAL = "Appraisal Mode"


class AcquisitionType(str, Enum):
    TRADE = "Trade"
    STREET_PURCHASE = "Street Purchase"
    LEASE_RETURN = "Lease Return"
    AUCTION = "Auction"


class StandardType(str, Enum):
    """Fixed document-type keys for the standards library (one document per key)."""

    SAFETY = "SAFETY"
    HCUV = "HCUV"
    DEALERSHIP = "DEALERSHIP"
    HONDA_MAINTENANCE = "HONDA_MAINTENANCE"


class DealershipBrand(str, Enum):
    HONDA = "Honda"
    TOYOTA = "Toyota"
    CBG = "CBG"
    CADILLAC = "Cadillac"
    FORD = "Ford"
    HYUNDAI = "Hyundai"
    NISSAN = "Nissan"
    OTHER = "Other"


class ReliabilityTag(str, Enum):
    """Technician estimate reliability relative to manager appraisals."""

    AGGRESSIVE = "Aggressive"
    ACCURATE = "Accurate"
    PASSIVE = "Passive"
