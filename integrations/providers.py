"""
Built-in provider definitions.

Each entry is the complete, static description of one provider; the
catalog never fetches or mutates them at runtime.
"""

from __future__ import annotations

from typing import List

from integrations.base import (
    OAUTH1_CREDENTIALS,
    AuthType,
    BodyFormat,
    Integration,
    RefreshStrategy,
)

# ── All known integrations: add new ones here ────────────────────────────

ALL_INTEGRATIONS: List[Integration] = [
    Integration(
        id="github",
        name="GitHub",
        authorization_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        # Only GitHub Apps with expiring user tokens hand out refresh tokens.
        docs_url="https://docs.github.com/en/apps/creating-github-apps/authenticating-with-a-github-app/refreshing-user-access-tokens",
    ),
    Integration(
        id="gmail",
        name="Gmail",
        authorization_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
    ),
    Integration(
        id="google-drive",
        name="Google Drive",
        authorization_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
    ),
    Integration(
        id="slack",
        name="Slack",
        authorization_url="https://slack.com/oauth/v2/authorize",
        token_url="https://slack.com/api/oauth.v2.access",
    ),
    Integration(
        id="hubspot",
        name="HubSpot",
        authorization_url="https://app.hubspot.com/oauth/authorize",
        token_url="https://api.hubapi.com/oauth/v1/token",
    ),
    Integration(
        id="salesforce",
        name="Salesforce",
        authorization_url="https://login.salesforce.com/services/oauth2/authorize",
        token_url="https://login.salesforce.com/services/oauth2/token",
    ),
    Integration(
        id="dropbox",
        name="Dropbox",
        authorization_url="https://www.dropbox.com/oauth2/authorize",
        token_url="https://api.dropboxapi.com/oauth2/token",
        refresh_strategy=RefreshStrategy.REFRESH_TOKEN_BASIC,
    ),
    Integration(
        id="spotify",
        name="Spotify",
        authorization_url="https://accounts.spotify.com/authorize",
        token_url="https://accounts.spotify.com/api/token",
        refresh_strategy=RefreshStrategy.REFRESH_TOKEN_BASIC,
    ),
    Integration(
        id="notion",
        name="Notion",
        authorization_url="https://api.notion.com/v1/oauth/authorize",
        token_url="https://api.notion.com/v1/oauth/token",
        refresh_strategy=RefreshStrategy.NONE,
        body_format=BodyFormat.JSON,
    ),
    Integration(
        id="twitter",
        name="Twitter",
        auth_type=AuthType.OAUTH1,
        authorization_url="https://api.twitter.com/oauth/authorize",
        token_url="https://api.twitter.com/oauth/access_token",
        refresh_strategy=RefreshStrategy.NONE,
        credential_fields=OAUTH1_CREDENTIALS,
    ),
]
