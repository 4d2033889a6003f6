"""Repository discovery from the GitHub REST API."""

from __future__ import annotations

import logging

import httpx

from tend import __version__
from tend.errors import ProviderError

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
PER_PAGE = 100


def discover_github_repos(
    org: str,
    token: str | None = None,
    client: httpx.Client | None = None,
) -> list[str]:
    """Discover all non-archived repos in a GitHub org or user account.

    Tries the /orgs endpoint first and falls back to /users on 404.

    Args:
        org: Org or user name.
        token: Optional API token; needed for private repos.
        client: HTTP client to use. A short-lived one is created if omitted.

    Returns:
        Sorted repo names.

    Raises:
        ProviderError: If the API returns a non-success status or cannot be reached.
    """
    headers = {"User-Agent": f"tend/{__version__}", "Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    own_client = client is None
    http = client or httpx.Client(base_url=GITHUB_API, timeout=30.0)
    try:
        for endpoint in ("orgs", "users"):
            try:
                return _fetch_repos(http, headers, endpoint, org)
            except ProviderError as e:
                if endpoint == "orgs" and e.status_code == 404:
                    logger.debug("%s is not an org, trying user endpoint", org)
                    continue
                raise
    finally:
        if own_client:
            http.close()

    return []


def _fetch_repos(
    client: httpx.Client,
    headers: dict[str, str],
    endpoint: str,
    name: str,
) -> list[str]:
    repos: list[str] = []
    page = 1
    while True:
        url = f"{GITHUB_API}/{endpoint}/{name}/repos"
        try:
            resp = client.get(
                url,
                params={"per_page": PER_PAGE, "page": page, "type": "all"},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise ProviderError(0, str(e), url=url) from e
        if not resp.is_success:
            raise ProviderError(resp.status_code, resp.text, url=str(resp.request.url))

        batch = resp.json()
        if not batch:
            break
        repos.extend(r["name"] for r in batch if not r.get("archived", False))
        page += 1

    return sorted(repos)
