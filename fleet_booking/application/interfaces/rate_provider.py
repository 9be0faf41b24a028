from fleet_booking.domain.value_objects.platform_rates import PlatformRates


class RateProvider:
    async def get_current_rates(self) -> PlatformRates:
        """
        Retorna el snapshot vigente.

        Raises:
            RatesUnavailableError: si alguna tarifa requerida no está definida.
        """
        raise NotImplementedError
