"""Trigger a rebuild of the static site through a GitHub repository dispatch."""

import logging
from typing import Optional

import httpx

from ob2static.config import DEPLOY_REQUIRED, ExporterConfig
from ob2static.core.models import DeployError

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


async def trigger_dispatch(
    config: ExporterConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> None:
    """Send a ``repository_dispatch`` event for ``config.user/config.repo``.

    Args:
        config: Settings carrying webhook_token, user, repo and event_type
        client: HTTP client to use; a short-lived one is created if omitted

    Raises:
        DeployError: If settings are missing or GitHub refuses the event
    """
    missing = config.missing(DEPLOY_REQUIRED)
    if missing:
        raise DeployError(f"Missing deploy settings: {', '.join(missing)}")

    url = f"{GITHUB_API}/repos/{config.user}/{config.repo}/dispatches"
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {config.webhook_token}",
    }
    payload = {"event_type": config.event_type}

    if client is None:
        async with httpx.AsyncClient(timeout=config.timeout) as owned:
            await _post(owned, url, headers, payload)
    else:
        await _post(client, url, headers, payload)

    logger.info(f"Sent {config.event_type} dispatch to {config.user}/{config.repo}")


async def _post(client: httpx.AsyncClient, url: str, headers: dict, payload: dict) -> None:
    try:
        response = await client.post(url, headers=headers, json=payload)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise DeployError(f"Deploy dispatch failed: {e}") from e
