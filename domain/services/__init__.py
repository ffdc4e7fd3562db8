"""
Domain services.

These services orchestrate higher-level workflows while depending only on
domain models and ports so that infrastructure and UI layers can remain thin.
"""

from .invitation_campaign import (  # noqa: F401
    InvitationCampaignRunner,
    NullCampaignListener,
    RetryPolicy,
    classify_failure,
    parse_score,
    require_credentials,
)
from .preflight import Preflight, preflight
from .web_filler import WebFiller

__all__ = [
    "Preflight",
    "preflight",
    "WebFiller",
    "InvitationCampaignRunner",
    "NullCampaignListener",
    "RetryPolicy",
    "classify_failure",
    "parse_score",
    "require_credentials",
]
