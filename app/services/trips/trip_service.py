from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from app.core.access_control import Subject, check
from app.core.database import unit_of_work
from app.core.errors import NotFound
from app.core.logger import logger
from app.models.user.user import UserRole
from app.models.trips.trip_model import Trip, TripPoint
from app.schemas.trip.trip_schema import SCALAR_FIELDS, DeletedTrip, TripCreate, TripPatch, TripPointIn
from app.services.preferences.preference_service import resolve_preference_ids
from app.utils.patch import is_set

TRIP_OWNERS = (UserRole.trip_owner,)


def _with_relations(stmt):
    return stmt.options(
        selectinload(Trip.owner),
        selectinload(Trip.images),
        selectinload(Trip.preferences),
        selectinload(Trip.points),
    )


def _make_points(points: List[TripPointIn]) -> List[TripPoint]:
    return [TripPoint(latitude=p.latitude, longitude=p.longitude) for p in points]


class TripService:
    """Trip CRUD. Every mutating call checks existence, then access, then writes
    in a single transaction on the session it is given."""

    async def _load_trip(self, db: AsyncSession, trip_id: int) -> Trip:
        result = await db.execute(
            _with_relations(select(Trip).where(Trip.id == trip_id))
            .execution_options(populate_existing=True)
        )
        trip = result.scalar_one_or_none()

        if not trip:
            logger.warning(f"Trip not found: ID {trip_id}")
            raise NotFound("Trip")
        return trip

    async def create_trip(self, db: AsyncSession, subject: Optional[Subject], trip_data: TripCreate) -> Trip:
        subject = check(subject, "create trips", roles=TRIP_OWNERS)

        async with unit_of_work(db, "create trip"):
            preferences = await resolve_preference_ids(db, trip_data.preference_ids)
            new_trip = Trip(
                **trip_data.model_dump(exclude={"preference_ids", "points"}),
                user_id=subject.id,
                preferences=preferences,
                points=_make_points(trip_data.points),
            )
            db.add(new_trip)
            await db.flush()
            trip_id = new_trip.id

        logger.info(f"Trip {trip_id} created by user {subject.id}")
        return await self._load_trip(db, trip_id)

    async def get_trip(self, db: AsyncSession, trip_id: int) -> Trip:
        return await self._load_trip(db, trip_id)

    async def list_trips(
        self,
        db: AsyncSession,
        user_id: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Trip]:
        query = _with_relations(select(Trip))

        if user_id is not None:
            query = query.where(Trip.user_id == user_id)
        if min_price is not None:
            query = query.where(Trip.price >= min_price)
        if max_price is not None:
            query = query.where(Trip.price <= max_price)

        result = await db.execute(query.order_by(Trip.id))
        trips = result.scalars().all()
        logger.info(f"Retrieved {len(trips)} trips")
        return trips

    async def list_my_trips(self, db: AsyncSession, subject: Optional[Subject]) -> List[Trip]:
        subject = check(subject, "view your trips", roles=TRIP_OWNERS)
        return await self.list_trips(db, user_id=subject.id)

    async def update_trip(self, db: AsyncSession, trip_id: int, subject: Optional[Subject], patch: TripPatch) -> Trip:
        trip = await self._load_trip(db, trip_id)
        check(subject, "update trips", roles=TRIP_OWNERS, owner_id=trip.user_id)

        async with unit_of_work(db, "update trip"):
            for field in SCALAR_FIELDS:
                value = getattr(patch, field)
                if is_set(value):
                    setattr(trip, field, value.value)
            await db.flush()

            if is_set(patch.points):
                trip.points = _make_points(patch.points.value)
            if is_set(patch.preference_ids):
                trip.preferences = await resolve_preference_ids(db, patch.preference_ids.value)
            await db.flush()

        logger.info(f"Trip {trip_id} updated by user {subject.id}")
        return await self._load_trip(db, trip_id)

    async def delete_trip(self, db: AsyncSession, trip_id: int, subject: Optional[Subject]) -> DeletedTrip:
        trip = await self._load_trip(db, trip_id)
        check(subject, "delete trips", roles=TRIP_OWNERS, owner_id=trip.user_id)

        deleted = DeletedTrip(id=trip.id, name=trip.name)
        async with unit_of_work(db, "delete trip"):
            # Points are removed with the trip; images stay with trip_id cleared.
            await db.delete(trip)

        logger.info(f"Trip {trip_id} deleted by user {subject.id}")
        return deleted
