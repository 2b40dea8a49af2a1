"""Discharge planning workflow for hospital inpatients."""

from __future__ import annotations

from dataclasses import replace
from typing import Hashable, Iterable

from medledger.discharge_types import (
    DischargeCompletion,
    DischargeEducation,
    DischargeError,
    DischargeErrorCode,
    DischargeMedication,
    DischargeOrders,
    DischargePlan,
    DischargeStatus,
    DMEOrder,
    FollowUpAppointment,
    HomeHealthArrangement,
    ReadinessScore,
    ReadmissionRisk,
    SNFCoordination,
    readiness_level_for,
    risk_level_for,
    validate_dates,
)
from medledger.ledger import Ledger


class HospitalDischarge:
    """Tracks discharge plans and everything arranged around them."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._next_plan_id = 0
        self._next_appointment_id = 0
        self._plans: dict[int, DischargePlan] = {}
        self._assessments: dict[int, ReadinessScore] = {}
        self._orders: dict[int, DischargeOrders] = {}
        self._home_health: dict[int, HomeHealthArrangement] = {}
        self._dme_orders: dict[int, DMEOrder] = {}
        self._appointments: dict[tuple[int, int], FollowUpAppointment] = {}
        self._education: dict[int, DischargeEducation] = {}
        self._snf: dict[int, SNFCoordination] = {}
        self._completions: dict[int, DischargeCompletion] = {}
        self._risks: dict[int, ReadmissionRisk] = {}

    def _emit(self, name: str, data: object) -> None:
        self.ledger.publish((name,), data)

    def _require_plan(self, plan_id: int) -> DischargePlan:
        try:
            return self._plans[plan_id]
        except KeyError:
            raise DischargeError(DischargeErrorCode.PLAN_NOT_FOUND) from None

    def initiate_discharge_planning(
        self,
        caller: Hashable,
        patient_id: bytes,
        hospital_id: bytes,
        admission_date: int,
        expected_discharge_date: int,
    ) -> int:
        """Open a new discharge plan and return its id (ids start at 0)."""
        self.ledger.require_auth(caller)
        validate_dates(admission_date, expected_discharge_date)

        plan_id = self._next_plan_id
        self._next_plan_id += 1
        self._plans[plan_id] = DischargePlan(
            plan_id=plan_id,
            patient_id=patient_id,
            hospital_id=hospital_id,
            admission_date=admission_date,
            expected_discharge_date=expected_discharge_date,
            actual_discharge_date=None,
            status=DischargeStatus.PLANNING,
            created_by=caller,
            created_at=self.ledger.timestamp,
        )
        self._emit("discharge_initiated", (plan_id, patient_id, hospital_id))
        return plan_id

    def assess_discharge_readiness(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        medical_stability_score: int,
        functional_status_score: int,
        support_system_score: int,
        notes: str,
    ) -> ReadinessScore:
        """Score readiness as the integer mean of the three sub-scores."""
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)

        average = (medical_stability_score + functional_status_score + support_system_score) // 3
        assessment = ReadinessScore(
            discharge_plan_id=discharge_plan_id,
            medical_stability_score=medical_stability_score,
            functional_status_score=functional_status_score,
            support_system_score=support_system_score,
            overall_score=average,
            readiness_level=readiness_level_for(average),
            assessed_by=caller,
            assessed_at=self.ledger.timestamp,
            notes=notes,
        )
        self._assessments[discharge_plan_id] = assessment
        self._emit("readiness_assessed", (discharge_plan_id, average))
        return assessment

    def create_discharge_orders(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        medications: Iterable[DischargeMedication],
        instructions: str,
        restrictions: str,
    ) -> None:
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)
        self._orders[discharge_plan_id] = DischargeOrders(
            discharge_plan_id=discharge_plan_id,
            medications=tuple(medications),
            instructions=instructions,
            restrictions=restrictions,
            created_by=caller,
            created_at=self.ledger.timestamp,
        )
        self._emit("orders_created", discharge_plan_id)

    def arrange_home_health(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        agency_id: bytes,
        service_type: str,
        frequency: str,
        start_date: int,
    ) -> None:
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)
        self._home_health[discharge_plan_id] = HomeHealthArrangement(
            discharge_plan_id=discharge_plan_id,
            agency_id=agency_id,
            service_type=service_type,
            frequency=frequency,
            start_date=start_date,
            arranged_by=caller,
            arranged_at=self.ledger.timestamp,
        )
        self._emit("home_health_arranged", (discharge_plan_id, agency_id))

    def order_dme_for_discharge(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        equipment_list: Iterable[str],
        supplier_id: bytes,
        delivery_date: int,
    ) -> None:
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)
        self._dme_orders[discharge_plan_id] = DMEOrder(
            discharge_plan_id=discharge_plan_id,
            equipment_list=tuple(equipment_list),
            supplier_id=supplier_id,
            delivery_date=delivery_date,
            ordered_by=caller,
            ordered_at=self.ledger.timestamp,
        )
        self._emit("dme_ordered", (discharge_plan_id, supplier_id))

    def schedule_followup_appointments(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        appointments: Iterable[FollowUpAppointment],
    ) -> list[int]:
        """Store each appointment under a fresh id and return the ids in order."""
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)

        appointment_ids = []
        for appointment in appointments:
            appointment_id = self._next_appointment_id
            self._next_appointment_id += 1
            self._appointments[(discharge_plan_id, appointment_id)] = appointment
            appointment_ids.append(appointment_id)

        self._emit("appointments_scheduled", (discharge_plan_id, len(appointment_ids)))
        return appointment_ids

    def provide_discharge_education(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        topics_covered: Iterable[str],
        materials_provided: Iterable[str],
        patient_understanding_level: int,
    ) -> None:
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)
        self._education[discharge_plan_id] = DischargeEducation(
            discharge_plan_id=discharge_plan_id,
            topics_covered=tuple(topics_covered),
            materials_provided=tuple(materials_provided),
            patient_understanding_level=patient_understanding_level,
            provided_by=caller,
            provided_at=self.ledger.timestamp,
        )
        self._emit("education_provided", (discharge_plan_id, patient_understanding_level))

    def coordinate_with_snf(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        snf_id: bytes,
        transfer_date: int,
        care_requirements: str,
    ) -> None:
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)
        self._snf[discharge_plan_id] = SNFCoordination(
            discharge_plan_id=discharge_plan_id,
            snf_id=snf_id,
            transfer_date=transfer_date,
            care_requirements=care_requirements,
            coordinated_by=caller,
            coordinated_at=self.ledger.timestamp,
        )
        self._emit("snf_coordinated", (discharge_plan_id, snf_id))

    def complete_discharge(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        actual_discharge_date: int,
        discharge_destination: str,
    ) -> None:
        """Mark the plan completed and record where the patient went."""
        self.ledger.require_auth(caller)
        plan = self._require_plan(discharge_plan_id)
        self._plans[discharge_plan_id] = replace(
            plan,
            status=DischargeStatus.COMPLETED,
            actual_discharge_date=actual_discharge_date,
        )
        self._completions[discharge_plan_id] = DischargeCompletion(
            discharge_plan_id=discharge_plan_id,
            actual_discharge_date=actual_discharge_date,
            discharge_destination=discharge_destination,
            completed_by=caller,
            completed_at=self.ledger.timestamp,
        )
        self._emit("discharge_completed", (discharge_plan_id, actual_discharge_date))

    def track_readmission_risk(
        self,
        caller: Hashable,
        discharge_plan_id: int,
        risk_factors: Iterable[str],
        risk_score: int,
        mitigation_plan: str,
    ) -> None:
        self.ledger.require_auth(caller)
        self._require_plan(discharge_plan_id)
        self._risks[discharge_plan_id] = ReadmissionRisk(
            discharge_plan_id=discharge_plan_id,
            risk_factors=tuple(risk_factors),
            risk_score=risk_score,
            risk_level=risk_level_for(risk_score),
            mitigation_plan=mitigation_plan,
            tracked_by=caller,
            tracked_at=self.ledger.timestamp,
        )
        self._emit("risk_tracked", (discharge_plan_id, risk_score))

    def get_discharge_plan(self, discharge_plan_id: int) -> DischargePlan:
        return self._require_plan(discharge_plan_id)

    def get_readiness_assessment(self, discharge_plan_id: int) -> ReadinessScore:
        try:
            return self._assessments[discharge_plan_id]
        except KeyError:
            raise DischargeError(DischargeErrorCode.PLAN_NOT_FOUND) from None