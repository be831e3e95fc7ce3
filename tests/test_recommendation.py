import pytest

from app.core.exceptions import NotFoundError
from app.services.recommendation import RecommendationEngine


@pytest.fixture
def engine(db):
    return RecommendationEngine(db)


@pytest.fixture
def catalog(seed_release, seed_genre, link):
    """Seed with {Action, Drama}; one release per overlap level."""
    action, drama, comedy = seed_genre("Action"), seed_genre("Drama"), seed_genre("Comedy")

    seed = seed_release("Seed")
    action_only = seed_release("Action only")
    both = seed_release("Action and drama")
    unrelated = seed_release("Comedy only")

    link(seed, action, drama)
    link(action_only, action)
    link(both, action, drama, comedy)
    link(unrelated, comedy)

    return {
        "seed": seed,
        "action_only": action_only,
        "both": both,
        "unrelated": unrelated,
    }


@pytest.mark.asyncio
async def test_ranks_by_shared_genre_count(engine, catalog):
    result = await engine.recommend("alice", catalog["seed"]["id"])

    assert result.base.id == catalog["seed"]["id"]
    assert [r.id for r in result.items] == [catalog["both"]["id"], catalog["action_only"]["id"]]


@pytest.mark.asyncio
async def test_seed_never_recommended(engine, catalog):
    result = await engine.recommend("alice", catalog["seed"]["id"])

    assert catalog["seed"]["id"] not in [r.id for r in result.items]


@pytest.mark.asyncio
async def test_no_likes_and_no_seed_returns_empty(engine, catalog, rate):
    rate("alice", catalog["both"], "DISLIKE")

    result = await engine.recommend("alice")

    assert result.base is None
    assert result.items == []


@pytest.mark.asyncio
async def test_seed_inferred_from_latest_like(engine, catalog, rate):
    rate("alice", catalog["unrelated"], "LIKE")
    rate("alice", catalog["seed"], "LIKE")
    rate("bob", catalog["action_only"], "LIKE")

    result = await engine.recommend("alice")

    assert result.base.id == catalog["seed"]["id"]
    assert result.items[0].id == catalog["both"]["id"]


@pytest.mark.asyncio
async def test_unknown_seed_raises_not_found(engine, catalog):
    with pytest.raises(NotFoundError):
        await engine.recommend("alice", 424242)


@pytest.mark.asyncio
async def test_seed_without_genres_has_no_items(engine, seed_release):
    lonely = seed_release("No genres")

    result = await engine.recommend("alice", lonely["id"])

    assert result.base.id == lonely["id"]
    assert result.items == []


@pytest.mark.asyncio
async def test_limit_applies(engine, catalog):
    result = await engine.recommend("alice", catalog["seed"]["id"], limit="1")

    assert [r.id for r in result.items] == [catalog["both"]["id"]]


@pytest.mark.asyncio
async def test_equal_overlap_ordered_by_id(engine, seed_release, seed_genre, link):
    action = seed_genre("Action")
    seed = seed_release("Seed")
    low_id = seed_release("Low id")
    high_id = seed_release("High id")
    link(seed, action)
    link(high_id, action)
    link(low_id, action)

    result = await engine.recommend("alice", seed["id"])

    assert [r.id for r in result.items] == [low_id["id"], high_id["id"]]
