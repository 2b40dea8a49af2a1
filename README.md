# medledger

In-memory record keepers for common hospital workflows. Every service is built
on a shared `medledger.ledger.Ledger`, which supplies the current timestamp,
checks that callers are authorised, and collects the events that operations
publish.

## The ledger

```python
from medledger.ledger import Ledger

ledger = Ledger(timestamp=1_700_000_000)
ledger.advance(3600)          # move the clock forward; returns the new time
ledger.events                 # list of Event(topics, data) published so far
```

`Ledger(timestamp=0, authorizer=None)` takes an optional `authorizer`, a
callable that receives an address and returns whether it signed. Without one,
every address is accepted. When the authorizer refuses, `require_auth` raises
`AuthorizationError`. Addresses are any hashable values (strings work well).

## Services

- `medledger.hospital_registry.HospitalRegistry`: register hospitals by wallet,
  update their metadata, and keep their configuration: departments, locations,
  equipment, policies, alerts, insurance providers, billing and emergency
  protocols, set all at once with `set_hospital_config` or one section at a
  time with the `update_*` methods. Getters return copies.
- `medledger.discharge.HospitalDischarge`: discharge planning. Plans are
  numbered from 0. Covers readiness assessment (integer mean of three scores;
  80 and above is ready, 60 and above needs preparation), discharge orders,
  home health, durable medical equipment, follow-up appointments, education,
  skilled nursing coordination, readmission risk (75 and above high, 50 and
  above medium) and completion. Record types, enums and the date check live in
  `medledger.discharge_types`.
- `medledger.imaging.ImagingRadiology`: imaging orders numbered from 1, moving
  through `ORDERED`, `SCHEDULED`, `IN_PROGRESS` and `COMPLETED` as they are
  scheduled, have images uploaded and receive a final report; preliminary
  reports and peer review requests; order lists per patient and per provider.
- `medledger.analytics.HealthcareAnalytics`: anonymised outcomes and population
  statistics, quality metrics and provider scorecards, readmission rates,
  patient satisfaction, compliance reports and peer benchmarks. Rates are
  expressed in basis points (parts per 10,000).
- `medledger.referrals.ReferralWorkflow`: referrals between providers, numbered
  from 1, with accept, decline, status updates by label (`parse_referral_status`),
  completion, and sharing or requesting care summaries.

## Example

```python
from medledger.ledger import Ledger
from medledger.imaging import ImagingRadiology

ledger = Ledger(timestamp=1_700_000_000)
imaging = ImagingRadiology(ledger)

order_id = imaging.order_imaging_study(
    "provider-1", "patient-1", "CT", "Chest", True,
    "Rule out pulmonary embolism", "URGENT",
)
imaging.schedule_imaging(order_id, "center-1", 1_700_086_400, bytes(32))
print(imaging.get_imaging_order(order_id).status)  # SCHEDULED
```

## Errors

Rejected operations raise exceptions:

- `RegistryError` (a `LookupError`) from the hospital registry;
- `DischargeError`, `ImagingError` and `ReferralError`, each with a `code`
  attribute from `DischargeErrorCode`, `ImagingErrorCode` or
  `ReferralErrorCode`;
- `ValueError` from analytics for a zero denominator or a satisfaction score
  outside 0-100, and `LookupError` when linking an unknown visit;
- `AuthorizationError` (a `PermissionError`) when the ledger refuses a caller.

## What it does not do

All records live in memory for the lifetime of the service objects; nothing is
written to disk or a database. There is no command-line tool, server or
network interface: the services are used as a Python library.

## Tests

```
pip install -e ".[test]"
pytest
```