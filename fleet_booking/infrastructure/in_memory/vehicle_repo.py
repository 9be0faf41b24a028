from fleet_booking.application.interfaces.vehicle_repo import VehicleRepo
from fleet_booking.domain.entities.vehicle import Vehicle, VehiclePricing
from fleet_booking.infrastructure.in_memory.store import InMemoryStore


class InMemoryVehicleRepo(VehicleRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_id(self, vehicle_id: str) -> Vehicle | None:
        return self._store.vehicles.get(vehicle_id)

    async def get_pricing(self, vehicle_id: str) -> VehiclePricing | None:
        vehicle = self._store.vehicles.get(vehicle_id)
        return vehicle.pricing if vehicle else None

    def add(self, vehicle: Vehicle) -> None:
        self._store.vehicles[vehicle.id] = vehicle
