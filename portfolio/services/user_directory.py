import asyncio
from typing import Any

from portfolio.exceptions import NotFoundError, ValidationError
from portfolio.logging import logger
from portfolio.schemas.user import UserProfile


class UserDirectory:
    """
    In-memory presence directory of user profiles keyed by user id.

    Backs the ``user`` message type. Entries live for the lifetime of the
    process and are not persisted.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._lock = asyncio.Lock()

    async def get_by_id(self, id: str) -> dict[str, Any]:
        async with self._lock:
            profile = self._profiles.get(id)
        if profile is None:
            raise NotFoundError()
        return profile.model_dump()

    async def create(self, data: Any, id: str | None = None) -> dict[str, Any]:
        """
        Store a profile under ``id``, replacing any profile already there.

        A client that reconnects announces itself again with the same id.

        Raises:
            ValidationError: If ``id`` is missing.
            pydantic.ValidationError: If ``data`` is not a valid profile.
        """
        if not id:
            raise ValidationError("User id is required")
        profile = UserProfile.model_validate(data)

        async with self._lock:
            replaced = id in self._profiles
            self._profiles[id] = profile

        logger.debug(
            f"User {id} {'replaced in' if replaced else 'added to'} directory"
        )
        return profile.model_dump()

    async def update(self, id: str, changes: dict[str, Any]) -> dict[str, Any]:
        async with self._lock:
            current = self._profiles.get(id)
            if current is None:
                raise NotFoundError()
            profile = UserProfile.model_validate(
                {**current.model_dump(), **changes}
            )
            self._profiles[id] = profile
        return profile.model_dump()

    async def delete(self, id: str) -> dict[str, Any]:
        async with self._lock:
            profile = self._profiles.pop(id, None)
        if profile is None:
            raise NotFoundError()
        logger.debug(f"User {id} removed from directory")
        return profile.model_dump()

    async def list(self) -> list[dict[str, Any]]:
        async with self._lock:
            items = list(self._profiles.items())
        return [{"id": key, **profile.model_dump()} for key, profile in items]
