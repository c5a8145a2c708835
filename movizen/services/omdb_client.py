# movizen/services/omdb_client.py

from typing import Any

import httpx
from thefuzz import fuzz

from ..config import (
    MIN_SEARCH_QUERY_LENGTH,
    OMDB_BASE_URL,
    OMDB_DEFAULT_TIMEOUT,
    SEARCH_RESULTS_LIMIT,
    logger,
)
from ..models import CandidateMetadata

_MISSING_VALUE = "N/A"


class MetadataUnavailable(Exception):
    """Raised internally when OMDb cannot answer; never leaves this module."""


class MetadataNotFound(MetadataUnavailable):
    """OMDb answered, but with no matching movie."""


def _clean(value: Any) -> str:
    """Returns a stripped string, treating OMDb's 'N/A' placeholder as empty."""
    if not isinstance(value, str):
        return ""
    stripped = value.strip()
    return "" if stripped == _MISSING_VALUE else stripped


def _candidate_from_payload(payload: dict[str, Any]) -> CandidateMetadata | None:
    title = _clean(payload.get("Title"))
    if not title:
        return None
    return CandidateMetadata(
        title=title,
        year=_clean(payload.get("Year")),
        poster_url=_clean(payload.get("Poster")),
        external_id=_clean(payload.get("imdbID")),
        director=_clean(payload.get("Director")),
        genre=_clean(payload.get("Genre")),
        plot=_clean(payload.get("Plot")),
        release_date_text=_clean(payload.get("Released")),
    )


def rank_candidates(
    query: str, candidates: list[CandidateMetadata], limit: int = SEARCH_RESULTS_LIMIT
) -> list[CandidateMetadata]:
    """
    Orders candidates by fuzzy title similarity to the query.

    token_set_ratio scores every title containing the query as a perfect match,
    so the plain ratio breaks those ties in favour of the closest full title.
    """
    query_lc = query.lower()
    ranked = sorted(
        candidates,
        key=lambda c: (
            fuzz.token_set_ratio(query_lc, c.title.lower()),
            fuzz.ratio(query_lc, c.title.lower()),
        ),
        reverse=True,
    )
    return ranked[:limit]


class OmdbClient:
    """
    Thin async wrapper around the OMDb search and detail endpoints.

    Both lookups absorb every failure: transport errors, bad JSON and OMDb's
    own "Movie not found!" answers all collapse to an empty result, so callers
    can always fall back to manual entry.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = OMDB_BASE_URL,
        timeout: float = OMDB_DEFAULT_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str) -> list[CandidateMetadata]:
        """Fuzzy title search. Queries under three characters never leave the process."""
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_QUERY_LENGTH:
            return []
        if not self.enabled:
            logger.info(f"[OMDB] Lookups disabled; skipping search for '{query}'.")
            return []

        try:
            payload = await self._get_json({"s": query, "type": "movie"})
        except MetadataNotFound:
            return []
        except MetadataUnavailable as e:
            logger.error(f"[OMDB] Search for '{query}' failed: {e}")
            return []

        raw_results = payload.get("Search")
        if not isinstance(raw_results, list):
            logger.warning(f"[OMDB] Unexpected search payload for '{query}'.")
            return []

        # Hits without an IMDb id can be neither selected nor looked up.
        candidates = [
            candidate
            for entry in raw_results
            if isinstance(entry, dict)
            and (candidate := _candidate_from_payload(entry)) is not None
            and candidate.external_id
        ]
        results = rank_candidates(query, candidates)
        logger.info(f"[OMDB] Found {len(results)} candidates for '{query}'.")
        return results

    async def fetch_details(self, external_id: str) -> CandidateMetadata | None:
        """Looks up the full record for one IMDb id, or None on any failure."""
        external_id = (external_id or "").strip()
        if not external_id or not self.enabled:
            return None

        try:
            payload = await self._get_json({"i": external_id, "plot": "short"})
        except MetadataNotFound:
            return None
        except MetadataUnavailable as e:
            logger.error(f"[OMDB] Detail lookup for '{external_id}' failed: {e}")
            return None

        details = _candidate_from_payload(payload)
        if details is None:
            logger.warning(f"[OMDB] Detail payload for '{external_id}' has no title.")
        return details

    async def _get_json(self, params: dict[str, str]) -> dict[str, Any]:
        request_params = {**params, "apikey": self.api_key or ""}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=request_params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise MetadataUnavailable(f"request error: {e}") from e
        except ValueError as e:  # JSON decode
            raise MetadataUnavailable(f"invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MetadataUnavailable(f"unexpected payload type {type(payload).__name__}")

        if payload.get("Response") != "True":
            # Domain-level "no match", reported by OMDb with HTTP 200.
            logger.info(f"[OMDB] No match for {params}: {payload.get('Error', 'unknown')}")
            raise MetadataNotFound(str(payload.get("Error", "no match")))
        return payload
