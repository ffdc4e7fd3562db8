from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from domain.errors import ConfigurationError
from domain.models import (
    AppConfig,
    CampaignConfig,
    JobTarget,
    PortalCredentials,
    SecurityAnswer,
)

CONFIG_FILE = "config.json"
CAMPAIGN_FILE = "campaign.json"

_BOOL_KEYS = ("headless", "debug_mode")
_STRING_KEYS = ("screenshot_dir", "finalize_base_url", "s3_bucket", "s3_profile")


class FileSystemConfigProvider:
    """Reads config.json and campaign.json from a config directory.

    Every public method re-reads from disk so that edits
    to the JSON files take effect without restarting the app.
    """

    def __init__(self, config_dir: str) -> None:
        self._config_dir = Path(config_dir)

    def validate(self) -> list[str]:
        errors: list[str] = []
        config_data = self._validate_json_file(self._config_dir / CONFIG_FILE, errors)
        if config_data is not None:
            errors.extend(self._validate_config_formats(config_data))

        campaign_path = self._config_dir / CAMPAIGN_FILE
        if campaign_path.is_file():
            campaign_data = self._validate_json_file(campaign_path, errors)
            if campaign_data is not None:
                errors.extend(self._validate_campaign_formats(campaign_data))
        return errors

    @staticmethod
    def _validate_config_formats(data: dict) -> list[str]:
        errors: list[str] = []
        for key in _BOOL_KEYS:
            value = data.get(key)
            if value is not None and not isinstance(value, bool):
                errors.append(f"{key} must be a boolean (true/false), not a string.")

        timeout = data.get("timeout_seconds")
        if timeout is not None and (
            isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
        ):
            errors.append("timeout_seconds must be a positive number of seconds.")

        for key in _STRING_KEYS:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                errors.append(f"{key} must be a string.")

        base_url = data.get("finalize_base_url")
        if isinstance(base_url, str) and not base_url.startswith("https://"):
            errors.append("finalize_base_url must start with 'https://'.")
        return errors

    @staticmethod
    def _validate_campaign_formats(data: dict) -> list[str]:
        errors: list[str] = []
        portal = data.get("portal") or {}
        if not (portal.get("username") or portal.get("email")):
            errors.append("campaign.json: portal.username (or portal.email) is required.")
        if not portal.get("password"):
            errors.append("campaign.json: portal.password is required.")

        for position, item in enumerate(data.get("security_questions") or []):
            if not isinstance(item, dict) or not item.get("question") or not item.get("answer"):
                errors.append(f"campaign.json: security_questions[{position}] needs question and answer.")

        jobs = data.get("jobs")
        if not isinstance(jobs, list) or not jobs:
            errors.append("campaign.json: jobs must be a non-empty list.")
        else:
            for position, job in enumerate(jobs):
                if not isinstance(job, dict) or not str(job.get("job_id", "")).strip():
                    errors.append(f"campaign.json: jobs[{position}] has no job_id.")
                    continue
                score = job.get("minimum_score", 0)
                if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 5:
                    errors.append(f"campaign.json: jobs[{position}].minimum_score must be between 0 and 5.")

        per_page = data.get("items_per_page")
        if per_page is not None and (isinstance(per_page, bool) or not isinstance(per_page, int) or per_page <= 0):
            errors.append("campaign.json: items_per_page must be a positive integer.")
        return errors

    def get_config(self) -> AppConfig:
        data = self._read_json(CONFIG_FILE)
        defaults = AppConfig()
        return AppConfig(
            headless=bool(data.get("headless", defaults.headless)),
            timeout_seconds=data.get("timeout_seconds", defaults.timeout_seconds),
            debug_mode=bool(data.get("debug_mode", defaults.debug_mode)),
            screenshot_dir=data.get("screenshot_dir", defaults.screenshot_dir),
            finalize_base_url=data.get("finalize_base_url", defaults.finalize_base_url),
            s3_bucket=data.get("s3_bucket"),
            s3_profile=data.get("s3_profile"),
        )

    def get_campaign(self) -> CampaignConfig:
        data = self._read_json(CAMPAIGN_FILE)
        portal = data.get("portal") or {}
        credentials = PortalCredentials(
            username=portal.get("username") or portal.get("email"),
            password=portal.get("password"),
            security_answers=tuple(
                SecurityAnswer(question=item["question"], answer=item["answer"])
                for item in data.get("security_questions") or []
            ),
        )
        jobs = tuple(
            JobTarget(job_id=str(job["job_id"]), minimum_score=float(job.get("minimum_score", 0)))
            for job in data.get("jobs") or []
        )
        return CampaignConfig(
            credentials=credentials,
            jobs=jobs,
            items_per_page=int(data.get("items_per_page", 100)),
        )

    # -- internal helpers ---------------------------------------------------

    def _read_json(self, filename: str) -> dict[str, Any]:
        path = self._config_dir / filename
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ConfigurationError(f"Missing file: {path}") from None
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    @staticmethod
    def _validate_json_file(path: Path, errors: list[str]) -> dict | None:
        """Validate a JSON file exists and holds an object.

        Returns the parsed dict on success, or None if the file
        is missing or unparseable.
        """
        if not path.is_file():
            errors.append(f"Missing file: {path}")
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            errors.append(f"Cannot read {path}: {exc}")
            return None
        if not isinstance(data, dict):
            errors.append(f"{path.name} must contain a JSON object")
            return None
        return data
