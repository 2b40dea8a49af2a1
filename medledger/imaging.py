"""Imaging orders, scheduling, DICOM uploads and radiology reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Hashable, Optional

from medledger.ledger import Ledger

ORDERED = "ORDERED"
SCHEDULED = "SCHEDULED"
IN_PROGRESS = "IN_PROGRESS"
COMPLETED = "COMPLETED"
PENDING = "PENDING"


class ImagingErrorCode(enum.IntEnum):
    ORDER_NOT_FOUND = 1
    UNAUTHORIZED_ACCESS = 2
    INVALID_STATUS = 3
    ALREADY_SCHEDULED = 4
    IMAGES_ALREADY_UPLOADED = 5
    PRELIMINARY_REPORT_EXISTS = 6
    FINAL_REPORT_EXISTS = 7
    PEER_REVIEW_EXISTS = 8

    @property
    def label(self) -> str:
        """The code's name in CamelCase, e.g. ``OrderNotFound``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class ImagingError(Exception):
    """Raised when an imaging operation is rejected."""

    def __init__(self, code: ImagingErrorCode) -> None:
        super().__init__(f"{code.label} (#{int(code)})")
        self.code = code


@dataclass(frozen=True)
class ImagingOrder:
    order_id: int
    provider_id: Hashable
    patient_id: Hashable
    study_type: str
    body_part: str
    contrast_required: bool
    clinical_indication: str
    priority: str
    status: str
    ordered_at: int


@dataclass(frozen=True)
class ImagingSchedule:
    order_id: int
    imaging_center: Hashable
    scheduled_time: int
    prep_instructions_hash: bytes
    scheduled_at: int


@dataclass(frozen=True)
class DicomImages:
    order_id: int
    imaging_center: Hashable
    dicom_hash: bytes
    image_count: int
    study_date: int
    uploaded_at: int


@dataclass(frozen=True)
class PreliminaryReport:
    order_id: int
    radiologist_id: Hashable
    report_hash: bytes
    urgent_findings: bool
    submitted_at: int


@dataclass(frozen=True)
class FinalReport:
    order_id: int
    radiologist_id: Hashable
    final_report_hash: bytes
    impression: str
    submitted_at: int


@dataclass(frozen=True)
class PeerReview:
    order_id: int
    requesting_radiologist: Hashable
    peer_radiologist: Hashable
    requested_at: int
    status: str


class ImagingRadiology:
    """Follows an imaging study from order to final report."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._last_order_id = 0
        self._orders: dict[int, ImagingOrder] = {}
        self._schedules: dict[int, ImagingSchedule] = {}
        self._images: dict[int, DicomImages] = {}
        self._preliminary: dict[int, PreliminaryReport] = {}
        self._final: dict[int, FinalReport] = {}
        self._peer_reviews: dict[int, PeerReview] = {}
        self._patient_orders: dict[Hashable, list[int]] = {}
        self._provider_orders: dict[Hashable, list[int]] = {}

    def _require_order(self, order_id: int) -> ImagingOrder:
        try:
            return self._orders[order_id]
        except KeyError:
            raise ImagingError(ImagingErrorCode.ORDER_NOT_FOUND) from None

    def _set_status(self, order: ImagingOrder, status: str) -> None:
        self._orders[order.order_id] = replace(order, status=status)

    def order_imaging_study(
        self,
        provider_id: Hashable,
        patient_id: Hashable,
        study_type: str,
        body_part: str,
        contrast_required: bool,
        clinical_indication: str,
        priority: str,
    ) -> int:
        """Create an order and return its id (ids start at 1)."""
        self.ledger.require_auth(provider_id)

        self._last_order_id += 1
        order_id = self._last_order_id
        self._orders[order_id] = ImagingOrder(
            order_id=order_id,
            provider_id=provider_id,
            patient_id=patient_id,
            study_type=study_type,
            body_part=body_part,
            contrast_required=contrast_required,
            clinical_indication=clinical_indication,
            priority=priority,
            status=ORDERED,
            ordered_at=self.ledger.timestamp,
        )
        self._patient_orders.setdefault(patient_id, []).append(order_id)
        self._provider_orders.setdefault(provider_id, []).append(order_id)
        return order_id

    def schedule_imaging(
        self,
        order_id: int,
        imaging_center: Hashable,
        scheduled_time: int,
        prep_instructions_hash: bytes,
    ) -> None:
        """Schedule an order once; the order moves to SCHEDULED."""
        self.ledger.require_auth(imaging_center)
        order = self._require_order(order_id)
        if order_id in self._schedules:
            raise ImagingError(ImagingErrorCode.ALREADY_SCHEDULED)

        self._schedules[order_id] = ImagingSchedule(
            order_id=order_id,
            imaging_center=imaging_center,
            scheduled_time=scheduled_time,
            prep_instructions_hash=prep_instructions_hash,
            scheduled_at=self.ledger.timestamp,
        )
        self._set_status(order, SCHEDULED)

    def upload_images(
        self,
        order_id: int,
        imaging_center: Hashable,
        dicom_hash: bytes,
        image_count: int,
        study_date: int,
    ) -> None:
        """Record the DICOM reference once; the order moves to IN_PROGRESS."""
        self.ledger.require_auth(imaging_center)
        order = self._require_order(order_id)
        if order_id in self._images:
            raise ImagingError(ImagingErrorCode.IMAGES_ALREADY_UPLOADED)

        self._images[order_id] = DicomImages(
            order_id=order_id,
            imaging_center=imaging_center,
            dicom_hash=dicom_hash,
            image_count=image_count,
            study_date=study_date,
            uploaded_at=self.ledger.timestamp,
        )
        self._set_status(order, IN_PROGRESS)

    def submit_preliminary_report(
        self,
        order_id: int,
        radiologist_id: Hashable,
        report_hash: bytes,
        urgent_findings: bool,
    ) -> None:
        """Submit a preliminary report; images must be uploaded first."""
        self.ledger.require_auth(radiologist_id)
        self._require_order(order_id)
        if order_id not in self._images:
            raise ImagingError(ImagingErrorCode.INVALID_STATUS)
        if order_id in self._preliminary:
            raise ImagingError(ImagingErrorCode.PRELIMINARY_REPORT_EXISTS)

        self._preliminary[order_id] = PreliminaryReport(
            order_id=order_id,
            radiologist_id=radiologist_id,
            report_hash=report_hash,
            urgent_findings=urgent_findings,
            submitted_at=self.ledger.timestamp,
        )

    def submit_final_report(
        self,
        order_id: int,
        radiologist_id: Hashable,
        final_report_hash: bytes,
        impression: str,
    ) -> None:
        """Submit the final report; the order moves to COMPLETED."""
        self.ledger.require_auth(radiologist_id)
        order = self._require_order(order_id)
        if order_id not in self._images:
            raise ImagingError(ImagingErrorCode.INVALID_STATUS)
        if order_id in self._final:
            raise ImagingError(ImagingErrorCode.FINAL_REPORT_EXISTS)

        self._final[order_id] = FinalReport(
            order_id=order_id,
            radiologist_id=radiologist_id,
            final_report_hash=final_report_hash,
            impression=impression,
            submitted_at=self.ledger.timestamp,
        )
        self._set_status(order, COMPLETED)

    def request_peer_review(
        self,
        order_id: int,
        requesting_radiologist: Hashable,
        peer_radiologist: Hashable,
    ) -> None:
        """Ask a peer radiologist to review an order; one request per order."""
        self.ledger.require_auth(requesting_radiologist)
        self._require_order(order_id)
        if order_id in self._peer_reviews:
            raise ImagingError(ImagingErrorCode.PEER_REVIEW_EXISTS)

        self._peer_reviews[order_id] = PeerReview(
            order_id=order_id,
            requesting_radiologist=requesting_radiologist,
            peer_radiologist=peer_radiologist,
            requested_at=self.ledger.timestamp,
            status=PENDING,
        )

    def get_imaging_order(self, order_id: int) -> Optional[ImagingOrder]:
        return self._orders.get(order_id)

    def get_imaging_schedule(self, order_id: int) -> Optional[ImagingSchedule]:
        return self._schedules.get(order_id)

    def get_dicom_images(self, order_id: int) -> Optional[DicomImages]:
        return self._images.get(order_id)

    def get_preliminary_report(self, order_id: int) -> Optional[PreliminaryReport]:
        return self._preliminary.get(order_id)

    def get_final_report(self, order_id: int) -> Optional[FinalReport]:
        return self._final.get(order_id)

    def get_peer_review(self, order_id: int) -> Optional[PeerReview]:
        return self._peer_reviews.get(order_id)

    def get_patient_orders(self, patient_id: Hashable) -> list[int]:
        """Order ids for a patient, oldest first."""
        return list(self._patient_orders.get(patient_id, ()))

    def get_provider_orders(self, provider_id: Hashable) -> list[int]:
        """Order ids placed by a provider, oldest first."""
        return list(self._provider_orders.get(provider_id, ()))