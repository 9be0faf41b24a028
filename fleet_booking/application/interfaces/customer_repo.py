from fleet_booking.domain.entities.customer import Customer, CustomerReferralState


class CustomerRepo:
    async def get_by_id(self, customer_id: str) -> Customer | None:
        raise NotImplementedError

    async def get_by_email(self, email: str) -> Customer | None:
        raise NotImplementedError

    async def get_referral_state(self, customer_id: str) -> CustomerReferralState | None:
        """Lectura sin bloqueo; solo informativa."""
        raise NotImplementedError

    async def lock_referral_state(self, customer_id: str) -> CustomerReferralState | None:
        """
        Lectura con bloqueo exclusivo de la fila del cliente hasta que termine
        la transacción en curso. Solo se invoca dentro de una transacción.
        """
        raise NotImplementedError

    async def mark_referral_discount_used(self, customer_id: str) -> None:
        raise NotImplementedError
