"""Tests for facet endpoints."""

from fastapi.testclient import TestClient


def facet(data: dict, dimension: str) -> dict:
    """Find a facet in a response body."""
    return next(f for f in data["facets"] if f["dimension"] == dimension)


class TestComputeFacets:
    """Tests for POST /catalog/{category_slug}/facets."""

    def test_facets_without_filters(self, client: TestClient) -> None:
        """A category without filters lists every dimension."""
        response = client.post("/catalog/clothing/facets", json={})
        assert response.status_code == 200

        data = response.json()
        assert data["category_slug"] == "clothing"
        assert data["total_matching"] == 24
        assert [f["dimension"] for f in data["facets"]] == [
            "brands",
            "sizes",
            "colors",
            "attributes.material",
            "price",
            "in_stock",
            "on_sale",
        ]
        assert facet(data, "colors")["kind"] == "color"
        assert all(v["color_hex"] for v in facet(data, "colors")["values"])
        assert all(v["count"] > 0 for v in facet(data, "brands")["values"])

    def test_body_is_optional(self, client: TestClient) -> None:
        """Omitting the body means no filters."""
        response = client.post("/catalog/clothing/facets")
        assert response.status_code == 200
        assert response.json()["total_matching"] == 24

    def test_selected_size_keeps_other_sizes(self, client: TestClient) -> None:
        """Selecting a size keeps sibling sizes countable."""
        baseline = facet(client.post("/catalog/clothing/facets", json={}).json(), "sizes")
        selected = baseline["values"][0]["name"]

        response = client.post("/catalog/clothing/facets", json={"sizes": [selected]})
        assert response.status_code == 200
        data = response.json()

        sizes = facet(data, "sizes")
        assert [(v["name"], v["count"]) for v in sizes["values"]] == [
            (v["name"], v["count"]) for v in baseline["values"]
        ]
        assert [v["name"] for v in sizes["values"] if v["selected"]] == [selected]
        assert data["total_matching"] == baseline["values"][0]["count"]
        assert data["filters"]["sizes"] == [selected]

    def test_filters_narrow_total(self, client: TestClient) -> None:
        """Adding filters never increases the total."""
        totals = []
        for body in (
            {},
            {"in_stock": True},
            {"in_stock": True, "price_range": {"min": 0, "max": 5000}},
        ):
            response = client.post("/catalog/clothing/facets", json=body)
            assert response.status_code == 200
            totals.append(response.json()["total_matching"])

        assert totals == sorted(totals, reverse=True)

    def test_whole_catalog(self, client: TestClient) -> None:
        """The 'all' slug covers every product."""
        response = client.post("/catalog/all/facets", json={})
        assert response.status_code == 200
        assert response.json()["total_matching"] == 54

    def test_unknown_category_returns_empty_facets(self, client: TestClient) -> None:
        """Unknown categories yield empty facets, not an error."""
        response = client.post("/catalog/garden/facets", json={"brands": ["Acme"]})
        assert response.status_code == 200

        data = response.json()
        assert data["total_matching"] == 0
        assert all(f["values"] == [] for f in data["facets"])

    def test_unknown_attribute_is_ignored(self, client: TestClient) -> None:
        """Filters on attributes outside the category do not narrow results."""
        response = client.post(
            "/catalog/clothing/facets",
            json={"attributes": {"storage": ["64 GB"]}},
        )
        assert response.status_code == 200
        assert response.json()["total_matching"] == 24

    def test_invalid_price_range(self, client: TestClient) -> None:
        """A price range with min above max is rejected."""
        response = client.post(
            "/catalog/clothing/facets",
            json={"price_range": {"min": 5000, "max": 1000}},
        )
        assert response.status_code == 422
