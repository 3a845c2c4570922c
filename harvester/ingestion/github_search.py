"""
GitHub repository search for harvest candidates.

Pages through /search/repositories (ranked by stars, descending) and stops on
the first empty page, the configured maximum, the page limit or a rate-limit
message. A page that cannot be fetched is logged and skipped.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from harvester.config import HarvestConfig
from harvester.errors import RateLimited, SearchError, SearchTransportError
from harvester.models.candidate import RepositoryCandidate

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"

# Statuses that will not get better on the next page
FATAL_STATUSES = {401, 422}


def is_rate_limited(payload: Any) -> bool:
    """GitHub reports its rate limit in the `message` field, not reliably in the status code."""
    if not isinstance(payload, dict):
        return False
    message = payload.get("message") or ""
    return "rate limit" in str(message).lower()


def parse_item(item: Dict[str, Any]) -> Optional[RepositoryCandidate]:
    clone_url = item.get("clone_url")
    if not clone_url:
        return None
    name = item.get("full_name") or item.get("name") or clone_url
    return RepositoryCandidate(name=name, clone_location=clone_url)


class GitHubSearchClient:
    def __init__(self, config: HarvestConfig, sleep: Callable[[float], None] = time.sleep):
        """
        config: harvest settings (token, query, page size, delay)
        sleep: called with `config.page_delay` between page requests
        """
        self.config = config
        self.search_url = f"{API_URL}/search/repositories"
        self.headers = {
            "Accept": "application/vnd.github+json",
        }
        if config.token:
            self.headers["Authorization"] = f"Bearer {config.token}"
        self._sleep = sleep

    def fetch_page(self, query: str, page: int) -> List[Dict[str, Any]]:
        """Fetch one page of search results and return its raw items."""
        params = {
            "q": query,
            "sort": "stars",
            "order": "desc",
            "per_page": self.config.per_page,
            "page": page,
        }
        try:
            response = requests.get(self.search_url, headers=self.headers, params=params)
        except requests.RequestException as e:
            raise SearchTransportError(str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise SearchTransportError(f"Undecodable response (HTTP {response.status_code})") from e

        if is_rate_limited(payload):
            raise RateLimited(payload.get("message"))

        if response.status_code != 200:
            message = payload.get("message", "") if isinstance(payload, dict) else ""
            if response.status_code in FATAL_STATUSES:
                raise SearchError(f"HTTP {response.status_code}: {message}")
            raise SearchTransportError(f"HTTP {response.status_code}: {message}")

        if not isinstance(payload, dict):
            raise SearchTransportError("Unexpected response shape")
        return payload.get("items") or []

    def search(
        self,
        query: Optional[str] = None,
        max_results: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> List[RepositoryCandidate]:
        """
        Collect up to `max_results` unique candidates, in the endpoint's ranking order.
        Defaults come from the config the client was built with.
        """
        query = query or self.config.search_query
        if max_results is None:
            max_results = self.config.max_repos
        if max_pages is None:
            max_pages = self.config.max_pages
        if max_results <= 0 or max_pages <= 0:
            return []

        logger.info(f"Searching for repositories (fetching up to {max_pages} pages): {query}")

        candidates: List[RepositoryCandidate] = []
        seen = set()

        for page in range(1, max_pages + 1):
            logger.info(f"Fetching page {page} of {max_pages}...")
            try:
                items = self.fetch_page(query, page)
            except SearchTransportError as e:
                logger.error(f"Failed to fetch page {page}: {e}")
                continue
            except RateLimited:
                logger.warning(f"GitHub API rate limit reached at page {page}")
                break

            if not items:
                logger.info(f"No more repositories found at page {page}, stopping pagination")
                break

            found = 0
            for item in items:
                candidate = parse_item(item)
                if candidate is None or candidate.clone_location in seen:
                    continue
                seen.add(candidate.clone_location)
                candidates.append(candidate)
                found += 1

            logger.info(f"Found {found} repositories on page {page} (total: {len(candidates)})")

            if len(candidates) >= max_results:
                logger.info(f"Reached maximum repository limit ({max_results})")
                break

            if page < max_pages:
                self._sleep(self.config.page_delay)

        if len(candidates) > max_results:
            candidates = candidates[:max_results]

        logger.info(f"Total of {len(candidates)} repositories to process")
        return candidates
