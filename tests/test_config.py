from datetime import timedelta

import pytest
from fastapi import HTTPException

from unifind.config import DEFAULT_JWT_SECRET, Settings
from unifind.core.states import Role
from unifind.security import create_access_token, decode_access_token


def test_postgres_url_gets_driver():
    settings = Settings(DATABASE_URL="postgresql://lf:secret@db/unifind")
    assert settings.DATABASE_URL == "postgresql+psycopg2://lf:secret@db/unifind"


def test_log_level_is_normalized():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_default_secret_is_flagged():
    assert Settings(JWT_SECRET=DEFAULT_JWT_SECRET).uses_default_secret
    assert not Settings(JWT_SECRET="prod-secret").uses_default_secret


def test_token_round_trip(student):
    principal = decode_access_token(create_access_token(student))
    assert principal == student
    assert principal.role == Role.STUDENT
    assert not principal.is_admin


def test_expired_token_is_rejected(admin):
    token = create_access_token(admin, expires_in=timedelta(minutes=-1))
    with pytest.raises(HTTPException) as excinfo:
        decode_access_token(token)
    assert excinfo.value.status_code == 401
