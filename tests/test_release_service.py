from datetime import date

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.services.release_service import ReleaseService, parse_iso_date, partial_date_window
from app.services.supabase_db import ReleaseFilter


@pytest.mark.parametrize("value,expected", [
    ("2024", (date(2024, 1, 1), date(2025, 1, 1))),
    ("2024-02", (date(2024, 2, 1), date(2024, 3, 1))),
    ("2024-12", (date(2024, 12, 1), date(2025, 1, 1))),
    ("2024-02-29", (date(2024, 2, 29), date(2024, 3, 1))),
    ("2023-12-31", (date(2023, 12, 31), date(2024, 1, 1))),
])
def test_partial_date_window(value, expected):
    assert partial_date_window(value) == expected


@pytest.mark.parametrize("value", ["24", "2024-1", "2024-13", "2023-02-29", "2024/01/01", ""])
def test_partial_date_window_rejects_bad_input(value):
    with pytest.raises(ValidationError):
        partial_date_window(value)


def test_parse_iso_date():
    assert parse_iso_date("2024-05-06", "startDate") == date(2024, 5, 6)
    with pytest.raises(ValidationError):
        parse_iso_date(None, "startDate")
    with pytest.raises(ValidationError):
        parse_iso_date("May 6", "startDate")


@pytest.fixture
def service(db):
    return ReleaseService(db)


@pytest.mark.asyncio
async def test_list_releases_filters_by_month_and_type(service, seed_release):
    seed_release("Late December", "2024-12-31")
    seed_release("New Year", "2025-01-01")
    december_movie = seed_release("December movie", "2024-12-02")
    seed_release("December show", "2024-12-03", media_type="tv")

    start, end = partial_date_window("2024-12")
    releases = await service.list_releases(
        ReleaseFilter(media_type="movie", date_from=start, date_before=end)
    )

    assert [r.title for r in releases] == ["December movie", "Late December"]
    assert releases[0].id == december_movie["id"]


@pytest.mark.asyncio
async def test_get_release_includes_genres_and_entry(service, seed_release, seed_genre, link, rate):
    release = seed_release("Dune", "2024-03-01")
    link(release, seed_genre("Science Fiction"), seed_genre("Adventure"))
    rate("alice", release, "LIKE", watched=True)

    details = await service.get_release(release["id"], "alice")

    assert [g.name for g in details.genres] == ["Adventure", "Science Fiction"]
    assert details.watchlist.rating == "LIKE"
    assert details.watchlist.watched is True

    anonymous = await service.get_release(release["id"])
    assert anonymous.watchlist is None


@pytest.mark.asyncio
async def test_get_release_not_found(service):
    with pytest.raises(NotFoundError):
        await service.get_release(999)


@pytest.mark.asyncio
async def test_releases_for_genre(service, seed_release, seed_genre, link):
    drama = seed_genre("Drama")
    comedy = seed_genre("Comedy")
    a = seed_release("A", "2024-02-01")
    b = seed_release("B", "2024-01-01")
    link(a, drama)
    link(b, drama, comedy)

    links = await service.releases_for_genre(drama["id"])

    assert [l.release.title for l in links] == ["B", "A"]
    assert all(l.genre.name == "Drama" for l in links)


@pytest.mark.asyncio
async def test_releases_for_unknown_genre(service):
    with pytest.raises(NotFoundError):
        await service.releases_for_genre(12345)
