"""
Dry-run of the add-movie flow against the live OMDb API.

Run:
    OMDB_API_KEY=... python scripts/dry_run_add_movie.py [--date YYYY-MM-DD] [titles...]

This does not start the bot or touch watchlist.json. Each title is typed into
a SearchCoordinator backed by in-memory storage, the top candidate is picked,
and the record that would be saved is printed as stored JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

from movizen.services.date_normalizer import DateEntryMode, InvalidDateError
from movizen.services.omdb_client import OmdbClient
from movizen.state import MemoryStorage, WatchlistStore
from movizen.workflows.search_coordinator import SearchCoordinator
from movizen.workflows.search_session import MissingRequiredFieldError


async def _run_for_title(
    title: str, client: OmdbClient, store: WatchlistStore, fallback_date: str | None
) -> None:
    print("\n===", title, "===")
    coordinator = SearchCoordinator(client, store, debounce_seconds=0.05)
    coordinator.text_changed(title)
    await coordinator.settle()

    results = coordinator.state.results
    if not results:
        print("No candidates; using the typed title as is.")
    else:
        print("Top candidates:")
        for candidate in results[:3]:
            print(f"- {candidate.title} ({candidate.year}) [{candidate.external_id}]")
        coordinator.select_candidate(results[0].external_id)
        await coordinator.settle()
        print(f"Pre-filled release date: {coordinator.state.release_date_text or '-'}")

    if not coordinator.state.release_date_text and fallback_date:
        coordinator.set_date_mode(DateEntryMode.MANUAL)
        coordinator.set_release_date_text(fallback_date)

    try:
        record = await coordinator.submit()
    except (InvalidDateError, MissingRequiredFieldError) as e:
        print(f"Not added: {e.user_message}")
        return
    finally:
        coordinator.close()
    print(json.dumps(record.to_dict(), indent=2))


async def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Dry-run the add-movie flow with OMDb lookups and in-memory storage"
    )
    parser.add_argument("titles", nargs="*", help="Movie titles to add (e.g., 'Inception')")
    parser.add_argument(
        "--date",
        default=None,
        help="Release date to use when OMDb does not provide one",
    )
    args = parser.parse_args(argv)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    client = OmdbClient(os.environ.get("OMDB_API_KEY"))
    store = WatchlistStore(MemoryStorage())
    titles = args.titles or ["Inception", "Dune: Part Two"]
    for t in titles:
        await _run_for_title(t, client, store, args.date)

    print(f"\n{len(store)} movie(s) would be saved.")


if __name__ == "__main__":
    asyncio.run(main())
