from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_booking.application.interfaces.vehicle_repo import VehicleRepo
from fleet_booking.domain.entities.vehicle import (
    Vehicle,
    VehicleApprovalStatus,
    VehiclePricing,
    VehicleStatus,
)
from fleet_booking.infrastructure.db.tables import vehicles


class VehicleRepoSQL(VehicleRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_row(self, vehicle_id: str):
        stmt = select(vehicles).where(vehicles.c.id == vehicle_id).limit(1)
        result = await self._session.execute(stmt)
        return result.mappings().first()

    async def get_by_id(self, vehicle_id: str) -> Vehicle | None:
        row = await self._get_row(vehicle_id)
        if not row:
            return None
        return Vehicle(
            id=row["id"],
            status=VehicleStatus(row["status"]),
            approval_status=VehicleApprovalStatus(row["approval_status"]),
            pricing=_to_pricing(row),
        )

    async def get_pricing(self, vehicle_id: str) -> VehiclePricing | None:
        row = await self._get_row(vehicle_id)
        if not row:
            return None
        return _to_pricing(row)


def _to_pricing(row) -> VehiclePricing:
    return VehiclePricing(
        day_rate=row["day_rate"],
        night_rate=row["night_rate"],
        full_day_rate=row["full_day_rate"],
        airport_pickup_rate=row["airport_pickup_rate"],
        fuel_upgrade_rate=row["fuel_upgrade_rate"],
        pricing_includes_fuel=bool(row["pricing_includes_fuel"]),
    )
