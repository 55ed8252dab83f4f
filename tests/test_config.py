# =============================================
# File: tests/test_config.py
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import pytest

from flamingo_proxy.config import (
    DEFAULT_ORIGINS,
    ConfigError,
    cors_origins_from_env,
    settings_from_env,
)

BASE_ENV = {
    "OPENAI_API_KEY": "sk-test",
    "AIRTABLE_PAT": "pat-test",
    "AIRTABLE_BASE": "appTEST",
    "SWIPES_TABLE_NAME": "Swipes",
}


def test_missing_required_vars_are_all_named():
    with pytest.raises(ConfigError) as exc:
        settings_from_env({"OPENAI_API_KEY": "sk-test", "AIRTABLE_BASE": "  "})
    msg = str(exc.value)
    assert "AIRTABLE_PAT" in msg
    assert "AIRTABLE_BASE" in msg
    assert "SWIPES_TABLE_NAME" in msg
    assert "OPENAI_API_KEY" not in msg


def test_defaults():
    s = settings_from_env(BASE_ENV)
    assert s.default_table == "Listings"
    assert s.poll_interval_s == 1.5
    assert s.run_timeout_s == 120.0
    assert s.openai_base_url == "https://api.openai.com/v1"
    assert s.airtable_api_url == "https://api.airtable.com/v0"
    assert s.cors_origins == DEFAULT_ORIGINS


def test_zero_timeout_means_unbounded_polling():
    s = settings_from_env({**BASE_ENV, "ASSISTANT_RUN_TIMEOUT_SECONDS": "0"})
    assert s.run_timeout_s is None


def test_bad_number_is_rejected():
    with pytest.raises(ConfigError):
        settings_from_env({**BASE_ENV, "ASSISTANT_POLL_INTERVAL_SECONDS": "soon"})


def test_settings_are_immutable():
    s = settings_from_env(BASE_ENV)
    with pytest.raises(Exception):
        s.openai_api_key = "other"


def test_cors_origins_override_and_trailing_slashes():
    env = {
        **BASE_ENV,
        "CORS_ALLOW_ORIGINS": "https://a.example, https://b.example ,",
        "OPENAI_BASE_URL": "http://localhost:9999/v1/",
    }
    assert cors_origins_from_env(env) == ("https://a.example", "https://b.example")
    assert settings_from_env(env).openai_base_url == "http://localhost:9999/v1"
