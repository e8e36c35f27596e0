from __future__ import annotations

import pytest
from pydantic import ValidationError

from aimod.core.config import HF_ROUTER_URL, Settings

REQUIRED = {
    "BOT_TOKEN": "123:abc",
    "WEBHOOK_URL": "https://bot.example.com/",
    "REDIS_URL": "redis://localhost:6379/0",
    "HF_TOKEN": "hf_test",
}


@pytest.fixture
def env(monkeypatch):
    for key, value in REQUIRED.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


def test_defaults(env) -> None:
    s = Settings(_env_file=None)
    assert s.VLM_BASE_URL == HF_ROUTER_URL
    assert s.VLM_MAX_TOKENS == 150
    assert s.VLM_TIMEOUT == 10.0
    assert s.RUN_MODE == "webhook"


@pytest.mark.parametrize("missing", sorted(REQUIRED))
def test_missing_required_value(env, missing) -> None:
    env.delenv(missing)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize("blank", sorted(REQUIRED))
def test_blank_required_value(env, blank) -> None:
    env.setenv(blank, "   ")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_run_mode(env) -> None:
    env.setenv("RUN_MODE", "Polling")
    assert Settings(_env_file=None).RUN_MODE == "polling"
    env.setenv("RUN_MODE", "cron")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
