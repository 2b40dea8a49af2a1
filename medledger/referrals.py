"""Referral workflow between a referring and a receiving provider."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Hashable, Iterable, Optional

from medledger.ledger import Ledger

CLINICAL_SUMMARY = "clinical"


class ReferralStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    SCHEDULED = "sched"
    IN_PROGRESS = "in_prog"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_STATUS_BY_LABEL = {status.value: status for status in ReferralStatus}
_CLOSED = frozenset({ReferralStatus.DECLINED, ReferralStatus.CANCELLED})


def parse_referral_status(status: str) -> ReferralStatus:
    """Map a status label to a status; unknown labels mean pending."""
    return _STATUS_BY_LABEL.get(status, ReferralStatus.PENDING)


class ReferralErrorCode(enum.IntEnum):
    NOT_FOUND = 1
    UNAUTHORIZED = 2
    INVALID_STATE = 3
    INVALID_INPUT = 4

    @property
    def label(self) -> str:
        """The code's name in CamelCase, e.g. ``NotFound``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class ReferralError(Exception):
    """Raised when a referral operation is rejected."""

    def __init__(self, code: ReferralErrorCode) -> None:
        super().__init__(f"{code.label} (#{int(code)})")
        self.code = code


@dataclass(frozen=True)
class Referral:
    referral_id: int
    referring_provider: Hashable
    receiving_provider: Hashable
    patient_id: Hashable
    specialty: str
    reason: str
    priority: str
    status: ReferralStatus
    created_at: int
    accepted_at: Optional[int] = None
    completed_at: Optional[int] = None

    def involves(self, provider: Hashable) -> bool:
        """Whether ``provider`` is the referring or the receiving provider."""
        return provider in (self.referring_provider, self.receiving_provider)


@dataclass(frozen=True)
class ReferralDeclineInfo:
    decline_reason: str
    suggest_alternative: Optional[Hashable]


@dataclass(frozen=True)
class ReferralCompletionInfo:
    consultation_summary_hash: bytes
    recommendations: str
    followup_required: bool


@dataclass(frozen=True)
class CareSummaryRecord:
    from_provider: Hashable
    summary_type: str
    summary_hash: bytes


@dataclass(frozen=True)
class CareSummaryRequestRecord:
    requesting_provider: Hashable
    information_needed: tuple[str, ...]


class ReferralWorkflow:
    """Creates referrals and moves them through their lifecycle."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._last_id = 0
        self._referrals: dict[int, Referral] = {}
        self._appointments: dict[int, int] = {}
        self._declines: dict[int, ReferralDeclineInfo] = {}
        self._notes: dict[int, str] = {}
        self._completions: dict[int, ReferralCompletionInfo] = {}
        self._summaries: dict[tuple[int, str], CareSummaryRecord] = {}
        self._summary_requests: dict[int, CareSummaryRequestRecord] = {}

    def _require(self, referral_id: int) -> Referral:
        try:
            return self._referrals[referral_id]
        except KeyError:
            raise ReferralError(ReferralErrorCode.NOT_FOUND) from None

    def _require_receiver(self, referral_id: int, provider: Hashable) -> Referral:
        referral = self._require(referral_id)
        if referral.receiving_provider != provider:
            raise ReferralError(ReferralErrorCode.UNAUTHORIZED)
        return referral

    def _require_open_participant(self, referral_id: int, provider: Hashable) -> Referral:
        referral = self._require(referral_id)
        if not referral.involves(provider):
            raise ReferralError(ReferralErrorCode.UNAUTHORIZED)
        if referral.status in _CLOSED:
            raise ReferralError(ReferralErrorCode.INVALID_STATE)
        return referral

    def create_referral(
        self,
        referring_provider: Hashable,
        patient_id: Hashable,
        referred_to: Hashable,
        specialty: str,
        reason: str,
        priority: str,
        clinical_summary_hash: bytes,
        requested_services: Iterable[str],
    ) -> int:
        """Open a pending referral and return its id (ids start at 1)."""
        self.ledger.require_auth(referring_provider)

        self._last_id += 1
        referral_id = self._last_id
        self._referrals[referral_id] = Referral(
            referral_id=referral_id,
            referring_provider=referring_provider,
            receiving_provider=referred_to,
            patient_id=patient_id,
            specialty=specialty,
            reason=reason,
            priority=priority,
            status=ReferralStatus.PENDING,
            created_at=self.ledger.timestamp,
        )
        self._summaries[(referral_id, CLINICAL_SUMMARY)] = CareSummaryRecord(
            referring_provider, CLINICAL_SUMMARY, clinical_summary_hash
        )
        self.ledger.publish(
            ("ref_creat", referring_provider),
            (referral_id, referred_to, tuple(requested_services)),
        )
        return referral_id

    def accept_referral(
        self,
        referral_id: int,
        receiving_provider: Hashable,
        estimated_appointment_date: Optional[int],
    ) -> None:
        """Accept a pending referral; only the receiving provider may."""
        self.ledger.require_auth(receiving_provider)
        referral = self._require_receiver(referral_id, receiving_provider)
        if referral.status is not ReferralStatus.PENDING:
            raise ReferralError(ReferralErrorCode.INVALID_STATE)

        self._referrals[referral_id] = replace(
            referral, status=ReferralStatus.ACCEPTED, accepted_at=self.ledger.timestamp
        )
        if estimated_appointment_date is not None:
            self._appointments[referral_id] = estimated_appointment_date
        self.ledger.publish(
            ("ref_acc", receiving_provider), (referral_id, estimated_appointment_date)
        )

    def decline_referral(
        self,
        referral_id: int,
        receiving_provider: Hashable,
        decline_reason: str,
        suggest_alternative: Optional[Hashable],
    ) -> None:
        """Decline a pending referral; only the receiving provider may."""
        self.ledger.require_auth(receiving_provider)
        referral = self._require_receiver(referral_id, receiving_provider)
        if referral.status is not ReferralStatus.PENDING:
            raise ReferralError(ReferralErrorCode.INVALID_STATE)

        self._referrals[referral_id] = replace(referral, status=ReferralStatus.DECLINED)
        self._declines[referral_id] = ReferralDeclineInfo(decline_reason, suggest_alternative)
        self.ledger.publish(("ref_decl", receiving_provider), referral_id)

    def update_referral_status(
        self,
        referral_id: int,
        provider_id: Hashable,
        status: str,
        status_note: Optional[str],
    ) -> None:
        """Set the status from a label; declined or cancelled referrals are final."""
        self.ledger.require_auth(provider_id)
        referral = self._require_open_participant(referral_id, provider_id)

        self._referrals[referral_id] = replace(referral, status=parse_referral_status(status))
        if status_note is not None:
            self._notes[referral_id] = status_note
        self.ledger.publish(("ref_st_up", provider_id), (referral_id, status))

    def complete_referral(
        self,
        referral_id: int,
        receiving_provider: Hashable,
        consultation_summary_hash: bytes,
        recommendations: str,
        followup_required: bool,
    ) -> None:
        """Close a referral with the consultation outcome (receiving provider only)."""
        self.ledger.require_auth(receiving_provider)
        referral = self._require_receiver(referral_id, receiving_provider)
        if referral.status in _CLOSED or referral.status is ReferralStatus.COMPLETED:
            raise ReferralError(ReferralErrorCode.INVALID_STATE)

        self._referrals[referral_id] = replace(
            referral, status=ReferralStatus.COMPLETED, completed_at=self.ledger.timestamp
        )
        self._completions[referral_id] = ReferralCompletionInfo(
            consultation_summary_hash, recommendations, followup_required
        )
        self.ledger.publish(
            ("ref_done", receiving_provider), (referral_id, followup_required)
        )

    def share_care_summary(
        self,
        referral_id: int,
        from_provider: Hashable,
        summary_type: str,
        summary_hash: bytes,
    ) -> None:
        """Attach a care summary; a later one of the same type replaces it."""
        self.ledger.require_auth(from_provider)
        self._require_open_participant(referral_id, from_provider)

        self._summaries[(referral_id, summary_type)] = CareSummaryRecord(
            from_provider, summary_type, summary_hash
        )
        self.ledger.publish(("care_shr", from_provider), (referral_id, summary_type))

    def request_care_summary(
        self,
        referral_id: int,
        requesting_provider: Hashable,
        information_needed: Iterable[str],
    ) -> None:
        """Ask the other provider for information about the referral."""
        self.ledger.require_auth(requesting_provider)
        self._require_open_participant(referral_id, requesting_provider)

        needed = tuple(information_needed)
        self._summary_requests[referral_id] = CareSummaryRequestRecord(
            requesting_provider, needed
        )
        self.ledger.publish(("care_req", requesting_provider), (referral_id, needed))

    def get_referral(self, referral_id: int) -> Referral:
        return self._require(referral_id)