from __future__ import annotations

import pytest

from aimod.core.i18n import I18N
from aimod.core.services import Services
from aimod.infra.rules_repo import RulesRepo
from aimod.infra.vlm_client import VLMClient

from fakes import FakeBot, FakeOpenAI, FakeRedis


@pytest.fixture(autouse=True, scope="session")
def _locales() -> None:
    I18N.load_locales()


@pytest.fixture
def redis_store() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def openai_client() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def bot() -> FakeBot:
    return FakeBot()


@pytest.fixture
def services(redis_store: FakeRedis, openai_client: FakeOpenAI) -> Services:
    return Services(rules=RulesRepo(redis_store), vlm=VLMClient(openai_client))
