"""API tests through FastAPI's TestClient against the in-memory store."""

import pytest


@pytest.fixture
def catalog(seed_release, seed_genre, link):
    action, drama = seed_genre("Action"), seed_genre("Drama")
    dune = seed_release("Dune", "2024-03-01", poster_path="/dune.jpg", overview="A desert planet.")
    arrival = seed_release("Arrival", "2024-03-15")
    show = seed_release("Shogun", "2024-02-27", media_type="tv")
    link(dune, action, drama)
    link(arrival, drama)
    link(show, action)
    return {"dune": dune, "arrival": arrival, "show": show, "action": action, "drama": drama}


class TestReleases:
    def test_list_by_month(self, client, catalog):
        response = client.get("/releases", params={"date": "2024-03"})

        assert response.status_code == 200
        assert [r["title"] for r in response.json()] == ["Dune", "Arrival"]
        assert response.json()[0]["posterPath"] == "/dune.jpg"

    def test_list_by_type(self, client, catalog):
        response = client.get("/releases", params={"type": "tv"})

        assert [r["title"] for r in response.json()] == ["Shogun"]

    def test_invalid_date_is_400(self, client, catalog):
        response = client.get("/releases", params={"date": "March"})

        assert response.status_code == 400
        assert response.json()["error"] is True

    def test_details_with_watchlist_entry(self, client, catalog, rate, auth_headers):
        rate("alice", catalog["dune"], "LIKE")

        response = client.get(f"/releases/{catalog['dune']['id']}", headers=auth_headers("alice"))

        body = response.json()
        assert response.status_code == 200
        assert sorted(g["name"] for g in body["genres"]) == ["Action", "Drama"]
        assert body["watchlist"]["rating"] == "LIKE"

    def test_details_anonymous(self, client, catalog):
        response = client.get(f"/releases/{catalog['dune']['id']}")

        assert response.status_code == 200
        assert response.json()["watchlist"] is None

    def test_details_not_found(self, client, catalog):
        response = client.get("/releases/99999")

        assert response.status_code == 404
        assert response.json()["status_code"] == 404


class TestPopular:
    def test_requires_both_dates(self, client, catalog):
        response = client.get("/releases/popular", params={"startDate": "2024-03-01"})

        assert response.status_code == 400

    def test_ranks_by_likes(self, client, catalog, rate):
        rate("alice", catalog["arrival"], "LIKE")
        rate("bob", catalog["arrival"], "LIKE")
        rate("alice", catalog["dune"], "LIKE")
        rate("carol", catalog["show"], "LIKE")

        response = client.get(
            "/releases/popular",
            params={"startDate": "2024-03-01", "endDate": "2024-04-01", "limit": "abc"},
        )

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [catalog["arrival"]["id"], catalog["dune"]["id"]]

    def test_empty_window(self, client, catalog):
        response = client.get("/releases/popular", params={"startDate": "2030-01-01", "endDate": "2030-02-01"})

        assert response.status_code == 200
        assert response.json() == []


class TestRecommended:
    def test_requires_auth(self, client, catalog):
        assert client.get("/releases/recommended").status_code == 401

    def test_rejects_bad_token(self, client, catalog):
        response = client.get("/releases/recommended", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_explicit_seed(self, client, catalog, auth_headers):
        response = client.get(
            "/releases/recommended",
            params={"releaseId": catalog["dune"]["id"]},
            headers=auth_headers(),
        )

        body = response.json()
        assert body["base"]["id"] == catalog["dune"]["id"]
        assert {r["id"] for r in body["items"]} == {catalog["arrival"]["id"], catalog["show"]["id"]}

    def test_no_likes(self, client, catalog, auth_headers):
        response = client.get("/releases/recommended", headers=auth_headers())

        assert response.status_code == 200
        assert response.json() == {"base": None, "items": []}

    def test_unknown_seed_is_404(self, client, catalog, auth_headers):
        response = client.get("/releases/recommended", params={"releaseId": 4242}, headers=auth_headers())

        assert response.status_code == 404


class TestGenres:
    def test_list_genres_alphabetical_and_cached(self, client, catalog, db, seed_genre):
        first = client.get("/genres").json()
        seed_genre("Comedy")
        second = client.get("/genres").json()

        assert [g["name"] for g in first] == ["Action", "Drama"]
        assert second == first

    def test_release_genre_links(self, client, catalog):
        response = client.get("/releaseGenre", params={"genreId": catalog["drama"]["id"]})

        assert response.status_code == 200
        assert [l["release"]["title"] for l in response.json()] == ["Dune", "Arrival"]

    def test_release_genre_unknown(self, client, catalog):
        assert client.get("/releaseGenre", params={"genreId": 777}).status_code == 404


class TestWatchlist:
    def test_crud_flow(self, client, catalog, auth_headers, db):
        headers = auth_headers("alice")
        dune_id = catalog["dune"]["id"]

        created = client.post("/watchlist", json={"releaseId": dune_id}, headers=headers)
        assert created.status_code == 200
        assert created.json() == {"releaseId": dune_id, "watched": False, "rating": None}

        updated = client.patch(f"/watchlist/{dune_id}", json={"rating": "LIKE"}, headers=headers)
        assert updated.json() == {"releaseId": dune_id, "watched": False, "rating": "LIKE"}

        watched = client.patch(f"/watchlist/{dune_id}", json={"watched": True}, headers=headers)
        assert watched.json()["rating"] == "LIKE"
        assert watched.json()["watched"] is True

        cleared = client.patch(f"/watchlist/{dune_id}", json={"rating": None}, headers=headers)
        assert cleared.json()["rating"] is None

        listing = client.get("/watchlist", headers=headers).json()
        assert [item["id"] for item in listing] == [dune_id]
        assert listing[0]["title"] == "Dune"

        deleted = client.delete(f"/watchlist/{dune_id}", headers=headers)
        assert deleted.json() == {"success": True, "releaseId": dune_id}
        assert db.rows("watchlist_entries") == []

    def test_one_entry_per_user_and_release(self, client, catalog, auth_headers, db):
        dune_id = catalog["dune"]["id"]
        client.post("/watchlist", json={"releaseId": dune_id}, headers=auth_headers("alice"))
        client.post("/watchlist", json={"releaseId": dune_id, "rating": "DISLIKE"}, headers=auth_headers("alice"))
        client.post("/watchlist", json={"releaseId": dune_id}, headers=auth_headers("bob"))

        entries = db.rows("watchlist_entries")
        assert len(entries) == 2
        alice = next(e for e in entries if e["user_id"] == "alice")
        assert alice["rating"] == "DISLIKE"

    def test_newest_first(self, client, catalog, auth_headers):
        headers = auth_headers()
        client.post("/watchlist", json={"releaseId": catalog["dune"]["id"]}, headers=headers)
        client.post("/watchlist", json={"releaseId": catalog["show"]["id"]}, headers=headers)

        listing = client.get("/watchlist", headers=headers).json()

        assert [item["id"] for item in listing] == [catalog["show"]["id"], catalog["dune"]["id"]]

    def test_items_carry_overview_and_genres(self, client, catalog, auth_headers):
        headers = auth_headers()
        client.post("/watchlist", json={"releaseId": catalog["dune"]["id"]}, headers=headers)
        client.post("/watchlist", json={"releaseId": catalog["show"]["id"]}, headers=headers)

        show, dune = client.get("/watchlist", headers=headers).json()

        assert dune["overview"] == "A desert planet."
        assert [g["name"] for g in dune["genres"]] == ["Action", "Drama"]
        assert dune["genres"][0]["sourceId"] == catalog["action"]["source_id"]
        assert show["overview"] is None
        assert [g["name"] for g in show["genres"]] == ["Action"]

    def test_unknown_release(self, client, catalog, auth_headers):
        response = client.post("/watchlist", json={"releaseId": 5555}, headers=auth_headers())

        assert response.status_code == 404

    def test_patch_untracked_release(self, client, catalog, auth_headers):
        response = client.patch(f"/watchlist/{catalog['dune']['id']}", json={"watched": True}, headers=auth_headers())

        assert response.status_code == 404

    def test_invalid_rating(self, client, catalog, auth_headers):
        response = client.post(
            "/watchlist",
            json={"releaseId": catalog["dune"]["id"], "rating": "MEH"},
            headers=auth_headers(),
        )

        assert response.status_code == 422

    def test_requires_auth(self, client, catalog):
        assert client.get("/watchlist").status_code == 401


class TestPreferences:
    def test_replace_genre_set(self, client, catalog, auth_headers, db):
        headers = auth_headers("alice")
        action_id, drama_id = catalog["action"]["id"], catalog["drama"]["id"]

        client.post("/user/preferences", json={"genreIds": [action_id, drama_id]}, headers=headers)
        response = client.post("/user/preferences", json={"genreIds": [drama_id, drama_id]}, headers=headers)

        assert response.json() == {"preferencesCompleted": True, "genreIds": [drama_id]}
        assert client.get("/user/preferences", headers=headers).json()["genreIds"] == [drama_id]
        assert [r["genre_id"] for r in db.rows("user_genre_preferences")] == [drama_id]

    def test_defaults_for_new_user(self, client, auth_headers):
        response = client.get("/user/preferences", headers=auth_headers("newcomer"))

        assert response.json() == {"preferencesCompleted": False, "genreIds": []}


class TestAuthSync:
    def test_sync_profile_upserts_user(self, client, auth_headers, db):
        response = client.post("/auth/sync-profile", headers=auth_headers("alice"))
        client.post("/auth/sync-profile", headers=auth_headers("alice"))

        assert response.json()["uid"] == "alice"
        assert [(u["id"], u["email"]) for u in db.rows("users")] == [("alice", "alice@example.com")]


class TestScheduler:
    def test_status_requires_admin(self, client):
        assert client.get("/scheduler/status").status_code == 401

    def test_status_with_token(self, client, auth_headers):
        response = client.get("/scheduler/status", headers=auth_headers("admin"))

        assert response.status_code == 200
        assert "running" in response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
