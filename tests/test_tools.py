"""Public listing tests."""
import uuid

import pytest
from fastapi import status

from app.services.errors import InvalidInput
from app.services.listing import category_summaries, list_tools


def titles(response):
    return [t["title"] for t in response.json()["tools"]]


class TestListTools:
    """Test GET /api/tools."""

    def test_only_approved_tools_listed(self, client, make_tool):
        make_tool(title="Visible")
        make_tool(title="Hidden", approved=False)

        response = client.get("/api/tools")
        assert response.status_code == status.HTTP_200_OK
        assert titles(response) == ["Visible"]
        assert response.json()["count"] == 1

    def test_default_sort_by_rating(self, client, make_tool):
        make_tool(title="Okay", avg_rating=3.0)
        make_tool(title="Great", avg_rating=4.8)
        make_tool(title="Unrated")

        assert titles(client.get("/api/tools")) == ["Great", "Okay", "Unrated"]

    def test_sort_newest(self, client, make_tool):
        make_tool(title="First", minutes=0)
        make_tool(title="Third", minutes=20)
        make_tool(title="Second", minutes=10)

        assert titles(client.get("/api/tools?sort=newest")) == ["Third", "Second", "First"]

    def test_sort_popular(self, client, make_tool):
        """A tool with 10 ratings precedes one with 2."""
        make_tool(title="Two Ratings", total_ratings=2, avg_rating=5.0)
        make_tool(title="Ten Ratings", total_ratings=10, avg_rating=3.5)
        make_tool(title="No Ratings")

        response = client.get("/api/tools?sort=popular")
        assert titles(response) == ["Ten Ratings", "Two Ratings", "No Ratings"]

        counts = [t["total_ratings"] for t in response.json()["tools"]]
        assert counts == sorted(counts, reverse=True)

    def test_unknown_sort(self, client):
        response = client.get("/api/tools?sort=random")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_category_filter(self, client, make_tool):
        make_tool(title="Grounding", category="mindfulness")
        make_tool(title="TIPP", category="distress-tolerance")

        assert titles(client.get("/api/tools?category=distress-tolerance")) == ["TIPP"]

    def test_empty_category_means_all(self, client, make_tool):
        make_tool(title="Grounding", category="mindfulness")
        make_tool(title="TIPP", category="distress-tolerance")

        assert len(titles(client.get("/api/tools?category="))) == 2

    def test_unknown_category(self, client):
        response = client.get("/api/tools?category=astrology")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_search_matches_title_description_or_creator(self, client, make_tool):
        make_tool(title="Box BREATHING", minutes=0)
        make_tool(title="Calm Down", description="Slow breathing for panic.", minutes=1)
        make_tool(title="Podcast", creator_name="The Breathing Room", minutes=2)
        make_tool(title="Journal Prompts", description="Write about your day.", minutes=3)
        make_tool(title="Breathing Hidden", approved=False, minutes=4)

        response = client.get("/api/tools?search=breathing&sort=newest")
        assert titles(response) == ["Podcast", "Calm Down", "Box BREATHING"]

    def test_search_treats_wildcards_literally(self, client, make_tool):
        make_tool(title="100% Calm")
        make_tool(title="Calm Space")

        assert titles(client.get("/api/tools", params={"search": "100%"})) == ["100% Calm"]
        assert titles(client.get("/api/tools", params={"search": "_"})) == []

    def test_blank_search_ignored(self, client, make_tool):
        make_tool(title="Anything")
        assert titles(client.get("/api/tools?search=%20%20")) == ["Anything"]

    def test_storage_disabled_returns_empty(self, disabled_client):
        response = disabled_client.get("/api/tools")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"tools": [], "count": 0}


class TestToolDetail:
    """Test GET /api/tools/{id}."""

    def test_get_approved_tool(self, client, approved_tool):
        response = client.get(f"/api/tools/{approved_tool.id}")
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["id"] == str(approved_tool.id)
        assert data["title"] == "Five Senses Grounding"
        assert data["approved"] is True

    def test_unapproved_tool_hidden(self, client, make_tool):
        hidden = make_tool(title="Hidden", approved=False)
        response = client.get(f"/api/tools/{hidden.id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize("tool_id", [str(uuid.uuid4()), "not-a-uuid"])
    def test_unknown_tool(self, client, tool_id):
        response = client.get(f"/api/tools/{tool_id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestCategories:
    """Test GET /api/categories."""

    def test_counts_approved_tools(self, client, make_tool):
        make_tool(category="mindfulness")
        make_tool(category="mindfulness")
        make_tool(category="emotion-regulation")
        make_tool(category="emotion-regulation", approved=False)

        response = client.get("/api/categories")
        assert response.status_code == status.HTTP_200_OK

        counts = {c["id"]: c["count"] for c in response.json()["categories"]}
        assert counts == {
            "mindfulness": 2,
            "distress-tolerance": 0,
            "emotion-regulation": 1,
            "interpersonal-effectiveness": 0,
        }

    def test_categories_without_store(self):
        summaries = category_summaries(None)
        assert len(summaries) == 4
        assert all(s.count == 0 for s in summaries)
        assert summaries[0].name == "Mindfulness"


class TestListingService:
    """Test list_tools directly."""

    def test_disabled_store_still_validates_arguments(self):
        assert list_tools(None) == []
        with pytest.raises(InvalidInput):
            list_tools(None, sort="alphabetical")


class TestDirectoryWorkflow:
    """End-to-end submission, moderation and listing."""

    def submit(self, client, payload, **overrides):
        response = client.post(
            "/api/submissions",
            json=payload(**overrides),
            headers={"X-Forwarded-For": "198.51.100.9"}
        )
        assert response.status_code == status.HTTP_201_CREATED
        return response.json()["submission_id"]

    def pending_ids(self, client, admin_headers):
        data = client.get("/api/admin/submissions", headers=admin_headers).json()
        return [s["id"] for s in data["submissions"]]

    def test_rejected_submission_never_listed(self, client, admin_headers, payload):
        submission_id = self.submit(client, payload)
        assert submission_id in self.pending_ids(client, admin_headers)

        response = client.post(
            f"/api/admin/submissions/{submission_id}/reject",
            headers=admin_headers
        )
        assert response.status_code == status.HTTP_200_OK

        assert submission_id not in self.pending_ids(client, admin_headers)
        assert client.get("/api/tools").json()["tools"] == []

    def test_approved_submission_listed(self, client, admin_headers, payload):
        submission_id = self.submit(client, payload, title="Box Breathing Guide")

        response = client.post(
            f"/api/admin/submissions/{submission_id}/approve",
            headers=admin_headers
        )
        assert response.status_code == status.HTTP_200_OK
        tool_id = response.json()["tool_id"]

        assert self.pending_ids(client, admin_headers) == []

        tools = client.get("/api/tools").json()["tools"]
        assert len(tools) == 1
        tool = tools[0]
        assert tool["id"] == tool_id
        assert tool["title"] == "Box Breathing Guide"
        assert tool["approved"] is True
        assert tool["avg_rating"] == 0.0
        assert tool["total_ratings"] == 0
        assert tool["view_count"] == 0
        assert tool["click_count"] == 0

        # Searchable and rateable once published
        assert len(client.get("/api/tools", params={"search": "box breathing"}).json()["tools"]) == 1
        rating = client.post(f"/api/tools/{tool_id}/ratings", json={"rating": 5})
        assert rating.json()["total_ratings"] == 1
