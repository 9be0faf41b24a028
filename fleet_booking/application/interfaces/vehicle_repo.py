from fleet_booking.domain.entities.vehicle import Vehicle, VehiclePricing


class VehicleRepo:
    async def get_by_id(self, vehicle_id: str) -> Vehicle | None:
        raise NotImplementedError

    async def get_pricing(self, vehicle_id: str) -> VehiclePricing | None:
        raise NotImplementedError
