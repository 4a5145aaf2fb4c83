from typing import Iterable, List, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from app.core.access_control import Subject, check
from app.core.cache import RedisCache
from app.core.config import settings
from app.core.database import dialect_name, unit_of_work
from app.core.errors import Conflict, NotFound, ValidationError
from app.core.logger import logger
from app.models.preferences.preference_model import Preference, UserPreference
from app.models.trips.trip_model import trip_preferences
from app.models.user.user import UserRole
from app.schemas.preference.preference_schema import (
    PreferenceCreate,
    PreferenceOut,
    PreferenceSpec,
    PreferenceUpdate,
)

PREFERENCE_CATALOG_KEY = "preferences:all"
ADMINS = (UserRole.admin,)

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def conflict_tolerant_insert(db: AsyncSession, model):
    """INSERT for ``model`` that supports ON CONFLICT DO NOTHING on this session's database.

    Looking a row up and inserting it when missing is not enough under
    concurrency: two requests can both miss and both insert. The unique
    index plus ON CONFLICT DO NOTHING lets the database pick one winner.
    """
    name = dialect_name(db)
    try:
        return _DIALECT_INSERTS[name](model)
    except KeyError:
        raise NotImplementedError(f"conflict-tolerant insert is not supported on {name}") from None


async def _invalidate_catalog(cache: Optional[RedisCache]) -> None:
    if cache is not None:
        await cache.delete(PREFERENCE_CATALOG_KEY)


async def ensure_preferences(db: AsyncSession, names: Iterable[str]) -> List[Preference]:
    """Return the preferences with these names, creating the missing ones.

    Runs inside the caller's transaction. Result order follows ``names``
    with duplicates dropped. Rows are inserted in sorted name order so two
    transactions upserting overlapping names lock them in the same order.
    """
    unique_names = list(dict.fromkeys(names))
    if not unique_names:
        return []

    stmt = (
        conflict_tolerant_insert(db, Preference)
        .values([{"name": name} for name in sorted(unique_names)])
        .on_conflict_do_nothing(index_elements=["name"])
    )
    await db.execute(stmt)

    result = await db.execute(select(Preference).where(Preference.name.in_(unique_names)))
    by_name = {pref.name: pref for pref in result.scalars().all()}
    return [by_name[name] for name in unique_names]


async def resolve_preference_ids(db: AsyncSession, ids: Iterable[int]) -> List[Preference]:
    """Load preferences by id; any unknown id fails the whole lookup."""
    unique_ids = list(dict.fromkeys(ids))
    if not unique_ids:
        return []

    result = await db.execute(select(Preference).where(Preference.id.in_(unique_ids)))
    by_id = {pref.id: pref for pref in result.scalars().all()}
    missing = [pref_id for pref_id in unique_ids if pref_id not in by_id]
    if missing:
        raise ValidationError("preference_ids", f"unknown preference ids {missing}")
    return [by_id[pref_id] for pref_id in unique_ids]


async def assign_to_user(
    db: AsyncSession,
    user_id: int,
    specs: List[PreferenceSpec],
    cache: Optional[RedisCache] = None,
) -> List[Preference]:
    """Add preferences to a user's set, creating tags by name as needed.

    Assigning a preference the user already has is a no-op.
    """
    async with unit_of_work(db, "assign preferences"):
        named = await ensure_preferences(db, [spec.name for spec in specs if spec.name is not None])
        by_name = {pref.name: pref for pref in named}
        by_id = {
            pref.id: pref
            for pref in await resolve_preference_ids(db, [spec.id for spec in specs if spec.name is None])
        }

        resolved: List[Preference] = []
        for spec in specs:
            pref = by_name[spec.name] if spec.name is not None else by_id[spec.id]
            if pref not in resolved:
                resolved.append(pref)

        if resolved:
            stmt = (
                conflict_tolerant_insert(db, UserPreference)
                .values([{"user_id": user_id, "preference_id": pref.id} for pref in sorted(resolved, key=lambda p: p.id)])
                .on_conflict_do_nothing(index_elements=["user_id", "preference_id"])
            )
            await db.execute(stmt)

    # New tags may have been created.
    await _invalidate_catalog(cache)
    logger.info(f"Assigned preferences {[p.id for p in resolved]} to user {user_id}")
    return resolved


async def get_user_preferences(db: AsyncSession, user_id: int) -> List[Preference]:
    result = await db.execute(
        select(Preference)
        .join(UserPreference, UserPreference.preference_id == Preference.id)
        .where(UserPreference.user_id == user_id)
        .order_by(Preference.id)
    )
    return result.scalars().all()


async def get_all_preferences(db: AsyncSession, cache: Optional[RedisCache] = None) -> List[PreferenceOut]:
    if cache is not None:
        cached = await cache.get(PREFERENCE_CATALOG_KEY)
        if cached is not None:
            logger.info(f"Retrieved {len(cached)} preferences from cache")
            return [PreferenceOut(**item) for item in cached]

    result = await db.execute(select(Preference).order_by(Preference.id))
    preferences = [PreferenceOut.model_validate(pref) for pref in result.scalars().all()]

    if cache is not None:
        await cache.set(
            PREFERENCE_CATALOG_KEY,
            [pref.model_dump() for pref in preferences],
            expire=settings.PREFERENCE_CACHE_TTL_SECONDS
        )
    return preferences


async def get_preference(db: AsyncSession, preference_id: int) -> Preference:
    preference = await db.get(Preference, preference_id)
    if not preference:
        raise NotFound("Preference")
    return preference


async def _flush_unique_name(db: AsyncSession, name: str) -> None:
    try:
        await db.flush()
    except IntegrityError:
        raise Conflict(f"Preference '{name}' already exists")


async def create_preference(
    db: AsyncSession,
    subject: Optional[Subject],
    data: PreferenceCreate,
    cache: Optional[RedisCache] = None,
) -> Preference:
    check(subject, "manage preferences", roles=ADMINS)

    async with unit_of_work(db, "create preference"):
        preference = Preference(name=data.name)
        db.add(preference)
        await _flush_unique_name(db, data.name)

    await _invalidate_catalog(cache)
    logger.info(f"Preference {preference.id} '{preference.name}' created")
    return preference


async def update_preference(
    db: AsyncSession,
    preference_id: int,
    subject: Optional[Subject],
    data: PreferenceUpdate,
    cache: Optional[RedisCache] = None,
) -> Preference:
    preference = await get_preference(db, preference_id)
    check(subject, "manage preferences", roles=ADMINS)

    async with unit_of_work(db, "update preference"):
        preference.name = data.name
        await _flush_unique_name(db, data.name)

    await _invalidate_catalog(cache)
    logger.info(f"Preference {preference_id} renamed to '{data.name}'")
    return preference


async def delete_preference(
    db: AsyncSession,
    preference_id: int,
    subject: Optional[Subject],
    cache: Optional[RedisCache] = None,
) -> None:
    await get_preference(db, preference_id)
    check(subject, "manage preferences", roles=ADMINS)

    async with unit_of_work(db, "delete preference"):
        await db.execute(delete(trip_preferences).where(trip_preferences.c.preference_id == preference_id))
        await db.execute(delete(UserPreference).where(UserPreference.preference_id == preference_id))
        await db.execute(delete(Preference).where(Preference.id == preference_id))

    await _invalidate_catalog(cache)
    logger.info(f"Preference {preference_id} deleted")
