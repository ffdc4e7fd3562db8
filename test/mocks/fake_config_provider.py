from __future__ import annotations

from domain.errors import ConfigurationError
from domain.models import AppConfig, CampaignConfig
from domain.ports import ConfigProviderPort


class InMemoryConfigProvider:
    """In-memory test double for ConfigProviderPort."""

    def __init__(
        self,
        *,
        config: AppConfig | None = None,
        campaign: CampaignConfig | None = None,
        validation_errors: list[str] | None = None,
    ) -> None:
        self._config = config or AppConfig()
        self._campaign = campaign
        self._validation_errors = validation_errors or []

    def get_config(self) -> AppConfig:
        return self._config

    def get_campaign(self) -> CampaignConfig:
        if self._campaign is None:
            raise ConfigurationError("Missing file: campaign.json")
        return self._campaign

    def validate(self) -> list[str]:
        return list(self._validation_errors)


_provider_check: ConfigProviderPort = InMemoryConfigProvider()
