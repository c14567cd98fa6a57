from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from cryptography.fernet import Fernet, InvalidToken

from ..users.center_repository import CenterRepository
from .cache import TTLCache
from .repository import SmsCredentialRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmsCredentials:
    api_key: str
    api_secret: str
    sender_number: str

    @property
    def complete(self) -> bool:
        return bool(self.api_key and self.api_secret and self.sender_number)


class CredentialResolver:
    """Per-center SMS credentials: database first, then environment fallback by center name."""

    def __init__(
        self,
        stored: SmsCredentialRepository,
        centers: CenterRepository,
        *,
        env_credentials: Optional[Mapping[str, Mapping[str, Optional[str]]]] = None,
        encryption_key: Optional[str] = None,
        cache: Optional[TTLCache] = None,
    ):
        self._stored = stored
        self._centers = centers
        self._env_credentials = dict(env_credentials or {})
        self._fernet = Fernet(encryption_key.encode()) if encryption_key else None
        self._cache = cache or TTLCache()

    def get(self, center_id: int) -> Optional[SmsCredentials]:
        return self._cache.get_or_compute(int(center_id), lambda: self._load(int(center_id)))

    def invalidate(self, center_id: int) -> None:
        self._cache.invalidate(int(center_id))

    def _load(self, center_id: int) -> Optional[SmsCredentials]:
        from_db = self._from_database(center_id)
        if from_db and from_db.complete:
            return from_db

        center = self._centers.get_by_id(center_id)
        center_name = center.name if center else None
        env = self._env_credentials.get(center_name or "")
        if env:
            from_env = SmsCredentials(
                api_key=env.get("api_key") or "",
                api_secret=env.get("api_secret") or "",
                sender_number=env.get("sender_number") or "",
            )
            if from_env.complete:
                logger.info("Using environment SMS credentials for %s", center_name)
                return from_env

        logger.warning("No SMS credentials for center %s (%s)", center_id, center_name)
        return None

    def _from_database(self, center_id: int) -> Optional[SmsCredentials]:
        row = self._stored.get(center_id)
        if not row:
            return None
        if self._fernet is None:
            logger.warning("Stored SMS credentials for center %s ignored: no encryption key", center_id)
            return None
        try:
            return SmsCredentials(
                api_key=self._decrypt(row.api_key),
                api_secret=self._decrypt(row.api_secret),
                sender_number=row.sender_number,
            )
        except InvalidToken:
            logger.error("Stored SMS credentials for center %s could not be decrypted", center_id)
            return None

    def _decrypt(self, token: str) -> str:
        return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")
