"""Step definitions for config validation BDD scenarios."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
from pytest_bdd import given, when, then, scenarios, parsers

from infra.config import FileSystemConfigProvider

scenarios("../features/config_validation.feature")


def _valid_config() -> dict:
    return {
        "headless": True,
        "timeout_seconds": 30,
        "debug_mode": False,
        "screenshot_dir": "logs",
        "finalize_base_url": "https://tfwp.lmia.esdc.gc.ca",
    }


def _valid_campaign() -> dict:
    return {
        "portal": {"username": "rcic@example.com", "password": "secret"},
        "security_questions": [{"question": "First pet?", "answer": "Rex"}],
        "jobs": [{"job_id": "1234567", "minimum_score": 3}],
    }


def _place_files(base: Path, *, config: dict | None = None) -> None:
    (base / "config.json").write_text(json.dumps(config if config is not None else _valid_config()))


@pytest.fixture()
def config_ctx(tmp_path: Path) -> dict:
    return {"tmp_path": tmp_path, "errors": []}


@given("a complete config folder", target_fixture="config_ctx")
def given_complete(tmp_path: Path) -> dict:
    _place_files(tmp_path)
    return {"tmp_path": tmp_path, "errors": []}


@given("a config folder without config.json", target_fixture="config_ctx")
def given_no_config_json(tmp_path: Path) -> dict:
    return {"tmp_path": tmp_path, "errors": []}


@given("a config folder with invalid JSON in config.json", target_fixture="config_ctx")
def given_invalid_json(tmp_path: Path) -> dict:
    (tmp_path / "config.json").write_text("{bad")
    return {"tmp_path": tmp_path, "errors": []}


@given(
    parsers.parse('a config folder with "{key}" set to the string "{value}"'),
    target_fixture="config_ctx",
)
def given_string_value(tmp_path: Path, key: str, value: str) -> dict:
    cfg = _valid_config()
    cfg[key] = value
    _place_files(tmp_path, config=cfg)
    return {"tmp_path": tmp_path, "errors": []}


@given("a campaign.json without a portal password")
def given_campaign_without_password(config_ctx: dict) -> None:
    campaign = _valid_campaign()
    del campaign["portal"]["password"]
    (config_ctx["tmp_path"] / "campaign.json").write_text(json.dumps(campaign))


@given(parsers.parse("a campaign.json with minimum score {score:d}"))
def given_campaign_with_score(config_ctx: dict, score: int) -> None:
    campaign = _valid_campaign()
    campaign["jobs"][0]["minimum_score"] = score
    (config_ctx["tmp_path"] / "campaign.json").write_text(json.dumps(campaign))


@when("the config is validated")
def when_validate(config_ctx: dict) -> None:
    provider = FileSystemConfigProvider(str(config_ctx["tmp_path"]))
    config_ctx["errors"] = provider.validate()


@then("validation passes with no errors")
def then_no_errors(config_ctx: dict) -> None:
    assert config_ctx["errors"] == []


@then(parsers.parse('validation reports an error containing "{text}"'))
def then_error_contains(config_ctx: dict, text: str) -> None:
    assert any(text in e for e in config_ctx["errors"]), (
        f"Expected error containing '{text}', got: {config_ctx['errors']}"
    )
