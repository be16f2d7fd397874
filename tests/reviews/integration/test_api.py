"""Integration tests for the reviews endpoints."""

import pytest


@pytest.fixture()
def author(make_user):
    return make_user(name="Author", email="author@example.com")


@pytest.fixture()
def reader(make_user):
    return make_user(name="Reader", email="reader@example.com")


@pytest.fixture()
def admin(make_user):
    return make_user(name="Admin", email="admin@example.com", role="admin")


@pytest.fixture()
def product(make_product):
    return make_product(name="Trail Runner")


@pytest.fixture()
def posted(client, auth, author, product):
    """A pending review by ``author``. Returns its id."""
    response = client.post(
        "/reviews",
        json={"product_id": product, "rating": 4, "title": "Solid", "comment": "Does the job.", "tags": ["fit"]},
        headers=auth(author),
    )
    return response.json()["data"]["id"]


class TestSubmit:
    def test_submit_hides_request_metadata(self, client, auth, author, product):
        response = client.post(
            "/reviews",
            json={"product_id": product, "rating": 5, "title": "Great", "comment": "Love them"},
            headers={**auth(author), "User-Agent": "pytest"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert "ip_address" not in data
        assert "user_agent" not in data

    def test_requires_sign_in(self, client, product):
        response = client.post("/reviews", json={"product_id": product, "rating": 5, "title": "t", "comment": "c"})
        assert response.status_code == 401

    def test_rating_out_of_range(self, client, auth, author, product):
        response = client.post(
            "/reviews",
            json={"product_id": product, "rating": 9, "title": "t", "comment": "c"},
            headers=auth(author),
        )
        assert response.status_code == 422

    def test_second_review_is_rejected(self, client, auth, author, product, posted):
        response = client.post(
            "/reviews",
            json={"product_id": product, "rating": 1, "title": "Again", "comment": "Again"},
            headers=auth(author),
        )
        assert response.status_code == 400


class TestModeration:
    def test_pending_queue_is_admin_only(self, client, auth, author, admin, posted):
        assert client.get("/reviews/pending", headers=auth(author)).status_code == 403

        body = client.get("/reviews/pending", headers=auth(admin)).json()["data"]
        assert [r["id"] for r in body["items"]] == [posted]

    def test_approved_reviews_are_listed_with_summary(self, client, auth, admin, product, posted):
        assert client.get(f"/reviews/product/{product}").json()["data"]["items"] == []

        client.put(f"/reviews/{posted}/approve", headers=auth(admin))

        body = client.get(f"/reviews/product/{product}").json()["data"]
        assert [r["id"] for r in body["items"]] == [posted]
        assert body["rating"] == {"average": 4.0, "count": 1}
        assert body["distribution"]["4"] == 1

        product_body = client.get(f"/products/{product}").json()["data"]
        assert product_body["rating"] == {"average": 4.0, "count": 1}

    def test_admin_response(self, client, auth, admin, posted):
        response = client.post(f"/reviews/{posted}/response", json={"comment": "Thanks!"}, headers=auth(admin))
        assert response.json()["data"]["admin_response"]["comment"] == "Thanks!"


class TestInteractions:
    def test_author_edits(self, client, auth, author, reader, posted):
        assert client.put(f"/reviews/{posted}", json={"title": "Hijack"}, headers=auth(reader)).status_code == 400

        response = client.put(f"/reviews/{posted}", json={"title": "Even better"}, headers=auth(author))
        assert response.json()["data"]["title"] == "Even better"

    def test_helpful_marks(self, client, auth, author, reader, posted):
        assert client.post(f"/reviews/{posted}/helpful", headers=auth(author)).status_code == 400

        response = client.post(f"/reviews/{posted}/helpful", headers=auth(reader))
        assert response.json()["data"]["helpful_count"] == 1

        response = client.delete(f"/reviews/{posted}/helpful", headers=auth(reader))
        assert response.json()["data"]["helpful_count"] == 0

    def test_report(self, client, auth, reader, posted):
        response = client.post(f"/reviews/{posted}/report", json={"reason": "spam"}, headers=auth(reader))
        assert response.status_code == 200
        assert response.json()["message"] == "Review reported"

    def test_my_reviews(self, client, auth, author, reader, posted):
        assert client.get("/reviews/mine", headers=auth(author)).json()["data"]["pagination"]["total"] == 1
        assert client.get("/reviews/mine", headers=auth(reader)).json()["data"]["pagination"]["total"] == 0

    def test_unknown_review(self, client):
        assert client.get("/reviews/missing").status_code == 404
