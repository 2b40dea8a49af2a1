"""In-memory ledgers for hospital registries, discharge planning, imaging, referrals and analytics."""

__version__ = "0.1.0"

__all__ = [
    "analytics",
    "discharge",
    "discharge_types",
    "hospital_registry",
    "imaging",
    "ledger",
    "referrals",
]