import random

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from pulsehustle.config import Settings
from pulsehustle.database import create_session_factory, init_db
from pulsehustle.models import Profile
from pulsehustle.platform import Platform


@pytest.fixture
def settings():
    """Settings for an isolated platform: inline matching, no Redis, no scheduler."""
    return Settings(
        _env_file=None,
        secret_key="test-secret",
        service_api_key="test-api-key",
        matching_dispatch="inline",
        matching_delay_seconds=0,
        cache_enabled=False,
        scheduler_enabled=False,
    )


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"timeout": 30},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def platform(session_factory, settings):
    platform = Platform(session_factory, settings=settings, rng=random.Random(42))
    yield platform
    await platform.close()


@pytest.fixture
def make_profile(platform):
    """Insert a profile row directly."""
    async def _make(profile_id, skills=None, location=None, **values):
        return await platform.gateway.insert(
            Profile,
            id=profile_id,
            username=profile_id,
            full_name=values.pop("full_name", f"Worker {profile_id}"),
            skills=skills or [],
            location=location,
            **values,
        )

    return _make
