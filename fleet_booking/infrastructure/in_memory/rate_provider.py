from decimal import Decimal

from fleet_booking.application.interfaces.rate_provider import RateProvider
from fleet_booking.domain.errors import RatesUnavailableError
from fleet_booking.domain.value_objects.platform_rates import PlatformRates
from fleet_booking.infrastructure.in_memory.store import InMemoryStore

# Clave en el store -> nombre mostrado cuando falta
_REQUIRED_RATES = {
    "customer_service_fee_rate_percent": "platform service fee",
    "fleet_owner_commission_rate_percent": "fleet owner commission",
    "vat_rate_percent": "VAT",
    "security_detail_rate": "security detail",
}


class InMemoryRateProvider(RateProvider):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_current_rates(self) -> PlatformRates:
        values: dict[str, Decimal] = {}
        for key, label in _REQUIRED_RATES.items():
            if key not in self._store.rates:
                raise RatesUnavailableError(label)
            values[key] = self._store.rates[key]
        return PlatformRates(**values)

    def set_rates(self, rates: PlatformRates) -> None:
        self._store.rates = {
            "customer_service_fee_rate_percent": rates.customer_service_fee_rate_percent,
            "fleet_owner_commission_rate_percent": rates.fleet_owner_commission_rate_percent,
            "vat_rate_percent": rates.vat_rate_percent,
            "security_detail_rate": rates.security_detail_rate,
        }
