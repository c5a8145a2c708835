"""Shared fakes for the metadata lookup used across test modules."""

from movizen.models import CandidateMetadata

INCEPTION_SEARCH_HIT = CandidateMetadata(
    title="Inception",
    year="2010",
    poster_url="https://m.media-amazon.com/images/inception.jpg",
    external_id="tt1375666",
)
INCEPTION_DETAILS = CandidateMetadata(
    title="Inception",
    year="2010",
    poster_url="https://m.media-amazon.com/images/inception.jpg",
    external_id="tt1375666",
    director="Christopher Nolan",
    genre="Action, Adventure, Sci-Fi",
    plot="A thief who steals corporate secrets through dream-sharing technology...",
    release_date_text="16 Jul 2010",
)


class FakeMetadataClient:
    """Scripted stand-in for OmdbClient that records every lookup."""

    def __init__(
        self,
        results: dict[str, list[CandidateMetadata]] | None = None,
        details: dict[str, CandidateMetadata] | None = None,
    ):
        self.results = results or {}
        self.details = details or {}
        self.search_calls: list[str] = []
        self.detail_calls: list[str] = []

    async def search(self, query: str) -> list[CandidateMetadata]:
        self.search_calls.append(query)
        return list(self.results.get(query, []))

    async def fetch_details(self, external_id: str) -> CandidateMetadata | None:
        self.detail_calls.append(external_id)
        return self.details.get(external_id)
