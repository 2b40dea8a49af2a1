"""Registry of hospitals and their operational configuration."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Hashable

from medledger.ledger import Ledger


class RegistryError(LookupError):
    """Raised when a registry operation cannot be carried out."""


@dataclass
class HospitalData:
    name: str
    location: str
    metadata: str


@dataclass
class Department:
    name: str
    head: str
    contact: str


@dataclass
class Location:
    name: str
    address: str
    metadata: str


@dataclass
class EquipmentResource:
    name: str
    quantity: int
    status: str
    metadata: str


@dataclass
class PolicyProcedure:
    title: str
    version: str
    details: str


@dataclass
class AlertSetting:
    alert_type: str
    enabled: bool
    channels: list[str] = field(default_factory=list)
    escalation_contact: str = ""


@dataclass
class InsuranceProviderConfig:
    provider_name: str
    plan_codes: list[str] = field(default_factory=list)
    billing_contact: str = ""
    metadata: str = ""


@dataclass
class BillingConfig:
    currency: str = ""
    payment_terms: str = ""
    tax_id: str = ""


@dataclass
class EmergencyProtocol:
    protocol_name: str
    description: str
    last_updated: int
    contact: str


@dataclass
class HospitalConfig:
    departments: list[Department] = field(default_factory=list)
    locations: list[Location] = field(default_factory=list)
    equipment: list[EquipmentResource] = field(default_factory=list)
    policies: list[PolicyProcedure] = field(default_factory=list)
    alerts: list[AlertSetting] = field(default_factory=list)
    insurance_providers: list[InsuranceProviderConfig] = field(default_factory=list)
    billing: BillingConfig = field(default_factory=BillingConfig)
    emergency_protocols: list[EmergencyProtocol] = field(default_factory=list)


class HospitalRegistry:
    """Stores hospitals by wallet address together with their configuration."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self._hospitals: dict[Hashable, HospitalData] = {}
        self._configs: dict[Hashable, HospitalConfig] = {}

    def _require_hospital(self, wallet: Hashable) -> None:
        if wallet not in self._hospitals:
            raise RegistryError("Hospital not found")

    def _config(self, wallet: Hashable) -> HospitalConfig:
        try:
            return self._configs[wallet]
        except KeyError:
            raise RegistryError("Hospital config not found") from None

    def _success(self, topic: str, wallet: Hashable) -> None:
        self.ledger.publish((topic, wallet), "success")

    def register_hospital(self, wallet: Hashable, name: str, location: str, metadata: str) -> None:
        """Register a hospital; each wallet may register only once."""
        self.ledger.require_auth(wallet)
        if wallet in self._hospitals:
            raise RegistryError("Hospital already registered")
        self._hospitals[wallet] = HospitalData(name, location, metadata)
        self._configs[wallet] = HospitalConfig()
        self._success("reg_hosp", wallet)

    def update_hospital(self, wallet: Hashable, metadata: str) -> None:
        """Replace the metadata of a registered hospital."""
        self.ledger.require_auth(wallet)
        self._require_hospital(wallet)
        self._hospitals[wallet].metadata = metadata
        self._success("upd_hosp", wallet)

    def get_hospital(self, wallet: Hashable) -> HospitalData:
        self._require_hospital(wallet)
        return copy.deepcopy(self._hospitals[wallet])

    def set_hospital_config(self, wallet: Hashable, config: HospitalConfig) -> None:
        """Replace the whole configuration in one call."""
        self.ledger.require_auth(wallet)
        self._require_hospital(wallet)
        self._configs[wallet] = copy.deepcopy(config)
        self._success("cfg_set", wallet)

    def get_hospital_config(self, wallet: Hashable) -> HospitalConfig:
        return copy.deepcopy(self._config(wallet))

    def _update_config(self, wallet: Hashable, name: str, value: Any, topic: str) -> None:
        self.ledger.require_auth(wallet)
        self._require_hospital(wallet)
        config = self._config(wallet)
        self._configs[wallet] = replace(config, **{name: copy.deepcopy(value)})
        self._success(topic, wallet)

    def update_departments(self, wallet: Hashable, departments: list[Department]) -> None:
        self._update_config(wallet, "departments", list(departments), "upd_dept")

    def update_locations(self, wallet: Hashable, locations: list[Location]) -> None:
        self._update_config(wallet, "locations", list(locations), "upd_loc")

    def update_equipment(self, wallet: Hashable, equipment: list[EquipmentResource]) -> None:
        self._update_config(wallet, "equipment", list(equipment), "upd_eq")

    def update_policies(self, wallet: Hashable, policies: list[PolicyProcedure]) -> None:
        self._update_config(wallet, "policies", list(policies), "upd_pol")

    def update_alerts(self, wallet: Hashable, alerts: list[AlertSetting]) -> None:
        self._update_config(wallet, "alerts", list(alerts), "upd_alrt")

    def update_insurance_providers(
        self, wallet: Hashable, insurance_providers: list[InsuranceProviderConfig]
    ) -> None:
        self._update_config(wallet, "insurance_providers", list(insurance_providers), "upd_ins")

    def update_billing(self, wallet: Hashable, billing: BillingConfig) -> None:
        self._update_config(wallet, "billing", billing, "upd_bill")

    def update_emergency_protocols(
        self, wallet: Hashable, protocols: list[EmergencyProtocol]
    ) -> None:
        self._update_config(wallet, "emergency_protocols", list(protocols), "upd_emg")