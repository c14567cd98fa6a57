from cryptography.fernet import Fernet

from src.center_attendance.center_attendance.notifications.cache import TTLCache
from src.center_attendance.center_attendance.notifications.credentials import CredentialResolver
from src.center_attendance.center_attendance.notifications.model import StoredCredentials
from src.center_attendance.center_attendance.users.center_model import Center

from tests.fakes import FakeCentersRepo

KEY = Fernet.generate_key().decode()

ENV = {"목동센터": {"api_key": "env-key", "api_secret": "env-secret", "sender_number": "0299998888"}}


class StoredRepo:
    def __init__(self, rows=None):
        self.rows = dict(rows or {})
        self.calls = 0

    def get(self, center_id):
        self.calls += 1
        return self.rows.get(center_id)


def stored_row(center_id, key=KEY):
    f = Fernet(key.encode())
    return StoredCredentials(
        center_id=center_id,
        api_key=f.encrypt(b"db-key").decode(),
        api_secret=f.encrypt(b"db-secret").decode(),
        sender_number="0211112222",
    )


def make_resolver(stored, **kwargs):
    centers = FakeCentersRepo(Center(1, "목동센터"), Center(2, "DMC센터"))
    kwargs.setdefault("env_credentials", ENV)
    kwargs.setdefault("encryption_key", KEY)
    return CredentialResolver(stored, centers, **kwargs)


def test_database_credentials_are_decrypted():
    creds = make_resolver(StoredRepo({1: stored_row(1)})).get(1)

    assert (creds.api_key, creds.api_secret, creds.sender_number) == ("db-key", "db-secret", "0211112222")


def test_environment_fallback_by_center_name():
    creds = make_resolver(StoredRepo()).get(1)

    assert creds.api_key == "env-key"


def test_undecryptable_row_falls_back_to_environment():
    other_key = Fernet.generate_key().decode()
    creds = make_resolver(StoredRepo({1: stored_row(1, other_key)})).get(1)

    assert creds.api_key == "env-key"


def test_no_credentials_anywhere():
    assert make_resolver(StoredRepo()).get(2) is None


def test_results_are_cached_until_invalidated():
    stored = StoredRepo({1: stored_row(1)})
    resolver = make_resolver(stored, cache=TTLCache(ttl_seconds=300))

    resolver.get(1)
    resolver.get(1)
    assert stored.calls == 1

    resolver.invalidate(1)
    resolver.get(1)
    assert stored.calls == 2


def test_missing_credentials_are_not_cached():
    stored = StoredRepo()
    resolver = make_resolver(stored)

    resolver.get(2)
    resolver.get(2)

    assert stored.calls == 2
