"""Value Object PlatformRates - snapshot de tarifas de la plataforma."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PlatformRates:
    """
    Tarifas vigentes al momento de cotizar.

    Cada valor tiene su propia vigencia; el calculador solo consume el
    snapshot que recibe.

    Attributes:
        customer_service_fee_rate_percent: Comisión de servicio al cliente (%).
        fleet_owner_commission_rate_percent: Comisión al dueño de la flota (%).
        vat_rate_percent: IVA (%).
        security_detail_rate: Monto fijo de escolta por tramo.
    """

    customer_service_fee_rate_percent: Decimal
    fleet_owner_commission_rate_percent: Decimal
    vat_rate_percent: Decimal
    security_detail_rate: Decimal
