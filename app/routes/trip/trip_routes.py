from typing import AsyncGenerator, Optional
import httpx
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas.common import Envelope, ListEnvelope, envelope, list_envelope
from app.schemas.trip.trip_schema import TripCreate, TripUpdate, TripResponse, DeletedTrip, SeedResult
from app.core.access_control import Subject
from app.core.config import settings
from app.core.database import get_db
from app.dependencies.auth import get_optional_subject, require_role
from app.models.user.user import UserRole
from app.services.trips.trip_service import TripService
from app.services.trips.seed_service import seed_trips

router = APIRouter(prefix="/trips", tags=['Trips'])

async def get_trip_service() -> TripService:
    return TripService()

async def get_overpass_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=settings.OVERPASS_TIMEOUT_SECONDS) as client:
        yield client

def _out(trips):
    return [TripResponse.model_validate(trip) for trip in trips]

# Routes on an existing trip take the optional subject so the service reports a
# missing trip as 404 before it looks at who is asking. Routes without a target
# check the role up front, before the body is validated.

require_trip_owner = require_role(UserRole.trip_owner)

@router.get("", response_model=ListEnvelope[TripResponse])
async def list_trips(
    user_id: Optional[int] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    session: AsyncSession = Depends(get_db),
    current_user: Optional[Subject] = Depends(get_optional_subject),
    trip_service: TripService = Depends(get_trip_service)
):
    trips = await trip_service.list_trips(session, user_id, min_price, max_price)
    return list_envelope("Trips retrieved successfully", _out(trips))

@router.get("/my-trips", response_model=ListEnvelope[TripResponse])
async def get_my_trips(
    session: AsyncSession = Depends(get_db),
    current_user: Subject = Depends(require_trip_owner),
    trip_service: TripService = Depends(get_trip_service)
):
    trips = await trip_service.list_my_trips(session, current_user)
    return list_envelope("Your trips retrieved successfully", _out(trips))

@router.post("/seed", response_model=Envelope[SeedResult])
async def seed_trips_route(
    session: AsyncSession = Depends(get_db),
    current_user: Subject = Depends(require_trip_owner),
    client: httpx.AsyncClient = Depends(get_overpass_client)
):
    count = await seed_trips(session, current_user, client)
    message = f"{count} trips seeded successfully" if count else "No suitable attractions found"
    return envelope(message, SeedResult(trips=count))

@router.get("/{trip_id}", response_model=Envelope[TripResponse])
async def get_trip(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: Optional[Subject] = Depends(get_optional_subject),
    trip_service: TripService = Depends(get_trip_service)
):
    trip = await trip_service.get_trip(session, trip_id)
    return envelope("Trip retrieved successfully", TripResponse.model_validate(trip))

@router.post("", response_model=Envelope[TripResponse], status_code=status.HTTP_201_CREATED)
async def create_trip_route(
    trip: TripCreate,
    session: AsyncSession = Depends(get_db),
    current_user: Subject = Depends(require_trip_owner),
    trip_service: TripService = Depends(get_trip_service)
):
    created = await trip_service.create_trip(session, current_user, trip)
    return envelope("Trip created successfully", TripResponse.model_validate(created))

@router.put("/{trip_id}", response_model=Envelope[TripResponse])
async def update_trip_route(
    trip_id: int,
    trip_update: TripUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: Optional[Subject] = Depends(get_optional_subject),
    trip_service: TripService = Depends(get_trip_service)
):
    trip = await trip_service.update_trip(session, trip_id, current_user, trip_update.to_patch())
    return envelope("Trip updated successfully", TripResponse.model_validate(trip))

@router.delete("/{trip_id}", response_model=Envelope[DeletedTrip])
async def delete_trip_route(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: Optional[Subject] = Depends(get_optional_subject),
    trip_service: TripService = Depends(get_trip_service)
):
    deleted = await trip_service.delete_trip(session, trip_id, current_user)
    return envelope("Trip deleted successfully", deleted)
