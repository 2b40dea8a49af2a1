"""Records, enums and validation rules for hospital discharge planning."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Hashable, Optional


class DischargeErrorCode(enum.IntEnum):
    INVALID_DATES = 1
    PLAN_NOT_FOUND = 2
    INVALID_STATUS = 3
    UNAUTHORIZED = 4

    @property
    def label(self) -> str:
        """The code's name in CamelCase, e.g. ``InvalidDates``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class DischargeError(Exception):
    """Raised when a discharge operation is rejected."""

    def __init__(self, code: DischargeErrorCode) -> None:
        super().__init__(code.label)
        self.code = code


class DischargeStatus(enum.Enum):
    PLANNING = enum.auto()
    READINESS_ASSESSED = enum.auto()
    ORDERS_CREATED = enum.auto()
    COMPLETED = enum.auto()
    CANCELLED = enum.auto()


class ReadinessLevel(enum.Enum):
    READY = enum.auto()
    NEEDS_PREPARATION = enum.auto()
    NOT_READY = enum.auto()


class RiskLevel(enum.Enum):
    LOW = enum.auto()
    MEDIUM = enum.auto()
    HIGH = enum.auto()


def _freeze(record: object, *names: str) -> None:
    for name in names:
        object.__setattr__(record, name, tuple(getattr(record, name)))


@dataclass(frozen=True)
class DischargePlan:
    plan_id: int
    patient_id: bytes
    hospital_id: bytes
    admission_date: int
    expected_discharge_date: int
    actual_discharge_date: Optional[int]
    status: DischargeStatus
    created_by: Hashable
    created_at: int


@dataclass(frozen=True)
class DischargeMedication:
    medication_name: str
    dosage: str
    frequency: str
    duration: str
    instructions: str


@dataclass(frozen=True)
class FollowUpAppointment:
    provider_id: bytes
    appointment_type: str
    scheduled_date: int
    location: str
    notes: str


@dataclass(frozen=True)
class ReadinessScore:
    discharge_plan_id: int
    medical_stability_score: int
    functional_status_score: int
    support_system_score: int
    overall_score: int
    readiness_level: ReadinessLevel
    assessed_by: Hashable
    assessed_at: int
    notes: str


@dataclass(frozen=True)
class DischargeOrders:
    discharge_plan_id: int
    medications: tuple[DischargeMedication, ...]
    instructions: str
    restrictions: str
    created_by: Hashable
    created_at: int

    def __post_init__(self) -> None:
        _freeze(self, "medications")


@dataclass(frozen=True)
class HomeHealthArrangement:
    discharge_plan_id: int
    agency_id: bytes
    service_type: str
    frequency: str
    start_date: int
    arranged_by: Hashable
    arranged_at: int


@dataclass(frozen=True)
class DMEOrder:
    discharge_plan_id: int
    equipment_list: tuple[str, ...]
    supplier_id: bytes
    delivery_date: int
    ordered_by: Hashable
    ordered_at: int

    def __post_init__(self) -> None:
        _freeze(self, "equipment_list")


@dataclass(frozen=True)
class DischargeEducation:
    discharge_plan_id: int
    topics_covered: tuple[str, ...]
    materials_provided: tuple[str, ...]
    patient_understanding_level: int
    provided_by: Hashable
    provided_at: int

    def __post_init__(self) -> None:
        _freeze(self, "topics_covered", "materials_provided")


@dataclass(frozen=True)
class SNFCoordination:
    discharge_plan_id: int
    snf_id: bytes
    transfer_date: int
    care_requirements: str
    coordinated_by: Hashable
    coordinated_at: int


@dataclass(frozen=True)
class DischargeCompletion:
    discharge_plan_id: int
    actual_discharge_date: int
    discharge_destination: str
    completed_by: Hashable
    completed_at: int


@dataclass(frozen=True)
class ReadmissionRisk:
    discharge_plan_id: int
    risk_factors: tuple[str, ...]
    risk_score: int
    risk_level: RiskLevel
    mitigation_plan: str
    tracked_by: Hashable
    tracked_at: int

    def __post_init__(self) -> None:
        _freeze(self, "risk_factors")


def validate_dates(admission_date: int, expected_discharge_date: int) -> None:
    """Require the expected discharge to fall strictly after admission."""
    if expected_discharge_date <= admission_date:
        raise DischargeError(DischargeErrorCode.INVALID_DATES)


def readiness_level_for(average_score: int) -> ReadinessLevel:
    """Classify an averaged readiness score."""
    if average_score >= 80:
        return ReadinessLevel.READY
    if average_score >= 60:
        return ReadinessLevel.NEEDS_PREPARATION
    return ReadinessLevel.NOT_READY


def risk_level_for(risk_score: int) -> RiskLevel:
    """Classify a readmission risk score."""
    if risk_score >= 75:
        return RiskLevel.HIGH
    if risk_score >= 50:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW