"""Population health, provider quality and performance analytics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Hashable, Iterable, Optional

from medledger.ledger import Ledger

RATE_SCALE = 10_000
QUALITY_TARGET = 8_500
DEFAULT_SUCCESS_RATE = 8_500
DEFAULT_SATISFACTION = 75
DEFAULT_BENCHMARK = (8_000, 8_200)
SECONDS_PER_DAY = 86_400

_AGE_MIDPOINTS = {
    "age0_18": 9,
    "age19_35": 27,
    "age36_50": 43,
    "age51_65": 58,
}


def age_group_to_midpoint(age_group: str) -> int:
    """Representative age for an age-group label; unknown groups count as 70."""
    return _AGE_MIDPOINTS.get(age_group, 70)


@dataclass(frozen=True)
class GenderStats:
    male: int
    female: int
    other: int


@dataclass(frozen=True)
class TreatmentOutcome:
    treatment: str
    count: int
    success_rate: int


@dataclass(frozen=True)
class OutcomeDistribution:
    outcome: str
    count: int


@dataclass(frozen=True)
class PopulationStats:
    condition: str
    total_cases: int
    average_age: int
    gender_distribution: GenderStats
    common_treatments: tuple[TreatmentOutcome, ...]
    outcome_distribution: tuple[OutcomeDistribution, ...]


@dataclass(frozen=True)
class QualityScore:
    metric_name: str
    score: int
    target: int
    percentile: int


@dataclass(frozen=True)
class EfficiencyMetric:
    name: str
    value: int


@dataclass(frozen=True)
class PeerComparison:
    peer_group: str
    rank: int
    total_peers: int
    has_data: bool


@dataclass(frozen=True)
class ProviderScorecard:
    provider_id: Hashable
    quality_metrics: tuple[QualityScore, ...]
    patient_satisfaction: int
    efficiency_metrics: tuple[EfficiencyMetric, ...]
    peer_comparison: PeerComparison


@dataclass(frozen=True)
class ReadmissionStats:
    facility_id: Hashable
    condition: str
    total_admissions: int
    readmissions: int
    readmission_rate: int
    days: int
    reporting_period: int


@dataclass(frozen=True)
class ComplianceReport:
    provider_id: Hashable
    compliance_type: str
    period: int
    compliant_cases: int
    total_cases: int
    compliance_rate: int
    issues_identified: tuple[str, ...]


@dataclass(frozen=True)
class BenchmarkResult:
    provider_id: Hashable
    metric: str
    provider_value: int
    peer_group: str
    peer_average: int
    peer_median: int
    percentile: int


@dataclass(frozen=True)
class AnonymizedOutcome:
    outcome_type: str
    condition: str
    treatment: str
    result: str
    age_group: str
    gender: str
    timestamp: int


@dataclass(frozen=True)
class QualityMetric:
    provider_id: Hashable
    metric_name: str
    numerator: int
    denominator: int
    reporting_period: int
    calculated_rate: int


@dataclass(frozen=True)
class SatisfactionRecord:
    visit_id: int
    patient_id: Hashable
    satisfaction_score: int
    feedback_hash: Optional[bytes]
    timestamp: int


@dataclass(frozen=True)
class ReadmissionRecord:
    facility_id: Hashable
    condition: str
    admission_count: int
    readmission_count: int
    days: int
    reporting_period: int


def _rate(part: int, whole: int) -> int:
    return part * RATE_SCALE // whole if whole > 0 else 0


class HealthcareAnalytics:
    """Aggregates anonymized outcomes, quality metrics and satisfaction scores."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._outcomes: dict[str, list[AnonymizedOutcome]] = {}
        self._quality: dict[tuple[Hashable, str], dict[int, QualityMetric]] = {}
        self._readmissions: dict[tuple[Hashable, str, int], ReadmissionRecord] = {}
        self._satisfaction: dict[int, SatisfactionRecord] = {}
        self._provider_satisfaction: dict[Hashable, list[int]] = {}
        self._compliance: dict[tuple[Hashable, str, int], tuple[int, int]] = {}
        self._benchmarks: dict[tuple[str, str], tuple[int, int]] = {}

    def record_anonymized_outcome(
        self,
        outcome_type: str,
        condition: str,
        treatment: str,
        result: str,
        age_group: str,
        gender: str,
        timestamp: int,
    ) -> None:
        """Append an anonymized outcome to the condition's history."""
        outcome = AnonymizedOutcome(
            outcome_type, condition, treatment, result, age_group, gender, timestamp
        )
        self._outcomes.setdefault(condition, []).append(outcome)
        self.ledger.publish(("rec_out", condition), outcome_type)

    def record_quality_metric(
        self,
        provider_id: Hashable,
        metric_name: str,
        numerator: int,
        denominator: int,
        reporting_period: int,
    ) -> None:
        """Store a metric; its rate is numerator/denominator in basis points."""
        self.ledger.require_auth(provider_id)
        if denominator == 0:
            raise ValueError("Denominator cannot be zero")
        metric = QualityMetric(
            provider_id=provider_id,
            metric_name=metric_name,
            numerator=numerator,
            denominator=denominator,
            reporting_period=reporting_period,
            calculated_rate=numerator * RATE_SCALE // denominator,
        )
        self._quality.setdefault((provider_id, metric_name), {})[reporting_period] = metric
        self.ledger.publish(("rec_qm", provider_id), metric_name)

    def _average_satisfaction(self, provider_id: Hashable) -> int:
        scores = self._provider_satisfaction.get(provider_id)
        if not scores:
            return DEFAULT_SATISFACTION
        return sum(scores) // len(scores)

    def calculate_provider_scorecard(
        self,
        provider_id: Hashable,
        metrics: Iterable[str],
        period_start: int,
        period_end: int,
    ) -> ProviderScorecard:
        """Score each metric by its earliest report within the period range."""
        quality_scores = []
        for metric_name in metrics:
            by_period = self._quality.get((provider_id, metric_name), {})
            in_range = [p for p in by_period if period_start <= p <= period_end]
            if not in_range:
                continue
            score = by_period[min(in_range)].calculated_rate
            percentile = 90 if score >= QUALITY_TARGET else score * 90 // QUALITY_TARGET
            quality_scores.append(QualityScore(metric_name, score, QUALITY_TARGET, percentile))

        return ProviderScorecard(
            provider_id=provider_id,
            quality_metrics=tuple(quality_scores),
            patient_satisfaction=self._average_satisfaction(provider_id),
            efficiency_metrics=(),
            peer_comparison=PeerComparison("none", 0, 0, False),
        )

    def get_population_statistics(
        self,
        condition: str,
        age_range: Optional[str],
        time_period: int,
    ) -> PopulationStats:
        """Summarize outcomes for a condition, optionally by age group and recency.

        A positive ``time_period`` keeps only outcomes no older than that many
        seconds before the ledger clock.
        """
        cutoff = max(0, self.ledger.timestamp - time_period) if time_period > 0 else 0
        selected = [
            outcome
            for outcome in self._outcomes.get(condition, ())
            if outcome.timestamp >= cutoff
            and (age_range is None or outcome.age_group == age_range)
        ]

        total = len(selected)
        total_age = sum(age_group_to_midpoint(o.age_group) for o in selected)
        genders = Counter(o.gender for o in selected)
        male = genders.get("male", 0)
        female = genders.get("female", 0)
        treatments = Counter(o.treatment for o in selected)
        results = Counter(o.result for o in selected)

        return PopulationStats(
            condition=condition,
            total_cases=total,
            average_age=total_age // total if total else 0,
            gender_distribution=GenderStats(male, female, total - male - female),
            common_treatments=tuple(
                TreatmentOutcome(name, count, DEFAULT_SUCCESS_RATE)
                for name, count in sorted(treatments.items())
            ),
            outcome_distribution=tuple(
                OutcomeDistribution(name, count) for name, count in sorted(results.items())
            ),
        )

    def track_readmission_rate(
        self,
        facility_id: Hashable,
        condition: str,
        days: int,
        reporting_period: int,
    ) -> ReadmissionStats:
        """Report the stored readmission rate, in basis points, for a period."""
        self.ledger.require_auth(facility_id)
        record = self._readmissions.get((facility_id, condition, reporting_period))
        admissions = record.admission_count if record else 0
        readmissions = record.readmission_count if record else 0
        stats = ReadmissionStats(
            facility_id=facility_id,
            condition=condition,
            total_admissions=admissions,
            readmissions=readmissions,
            readmission_rate=_rate(readmissions, admissions),
            days=days,
            reporting_period=reporting_period,
        )
        self.ledger.publish(("track_r", facility_id), condition)
        return stats

    def record_patient_satisfaction(
        self,
        visit_id: int,
        patient_id: Hashable,
        satisfaction_score: int,
        feedback_hash: Optional[bytes],
    ) -> None:
        """Store a 0-100 satisfaction score for a visit."""
        self.ledger.require_auth(patient_id)
        if not 0 <= satisfaction_score <= 100:
            raise ValueError("Satisfaction score must be 0-100")
        self._satisfaction[visit_id] = SatisfactionRecord(
            visit_id=visit_id,
            patient_id=patient_id,
            satisfaction_score=satisfaction_score,
            feedback_hash=feedback_hash,
            timestamp=self.ledger.timestamp,
        )
        self.ledger.publish(("rec_sat", patient_id), satisfaction_score)

    def generate_compliance_report(
        self,
        provider_id: Hashable,
        compliance_type: str,
        period: int,
    ) -> ComplianceReport:
        compliant, total = self._compliance.get((provider_id, compliance_type, period), (0, 0))
        return ComplianceReport(
            provider_id=provider_id,
            compliance_type=compliance_type,
            period=period,
            compliant_cases=compliant,
            total_cases=total,
            compliance_rate=_rate(compliant, total),
            issues_identified=(),
        )

    def benchmark_performance(
        self,
        provider_id: Hashable,
        metric: str,
        peer_group: str,
    ) -> BenchmarkResult:
        """Compare today's metric for a provider with the peer group's figures."""
        current_period = self.ledger.timestamp // SECONDS_PER_DAY
        stored = self._quality.get((provider_id, metric), {}).get(current_period)
        provider_value = stored.calculated_rate if stored else 0
        peer_avg, peer_median = self._benchmarks.get((peer_group, metric), DEFAULT_BENCHMARK)

        divisor = max(peer_avg, 1)
        if provider_value >= peer_avg:
            percentile = 50 + (provider_value - peer_avg) * 50 // divisor
        else:
            percentile = provider_value * 50 // divisor

        return BenchmarkResult(
            provider_id=provider_id,
            metric=metric,
            provider_value=provider_value,
            peer_group=peer_group,
            peer_average=peer_avg,
            peer_median=peer_median,
            percentile=min(percentile, 100),
        )

    def update_readmission_data(
        self,
        facility_id: Hashable,
        condition: str,
        admission_count: int,
        readmission_count: int,
        days: int,
        reporting_period: int,
    ) -> None:
        self.ledger.require_auth(facility_id)
        self._readmissions[(facility_id, condition, reporting_period)] = ReadmissionRecord(
            facility_id, condition, admission_count, readmission_count, days, reporting_period
        )

    def update_compliance_data(
        self,
        provider_id: Hashable,
        compliance_type: str,
        period: int,
        compliant_cases: int,
        total_cases: int,
    ) -> None:
        self.ledger.require_auth(provider_id)
        self._compliance[(provider_id, compliance_type, period)] = (compliant_cases, total_cases)

    def update_benchmark_data(
        self,
        peer_group: str,
        metric: str,
        peer_average: int,
        peer_median: int,
    ) -> None:
        self._benchmarks[(peer_group, metric)] = (peer_average, peer_median)

    def link_satisfaction_to_provider(self, provider_id: Hashable, visit_id: int) -> None:
        """Count a visit's satisfaction score towards a provider's average."""
        self.ledger.require_auth(provider_id)
        try:
            record = self._satisfaction[visit_id]
        except KeyError:
            raise LookupError("Satisfaction record not found") from None
        self._provider_satisfaction.setdefault(provider_id, []).append(
            record.satisfaction_score
        )