"""Tests for category taxonomy and scope resolution."""

import pytest

from storefront.catalog.seed import EMBEDDED_TAXONOMY
from storefront.catalog.taxonomy import Category, CategoryTree, slugify


class TestSlugify:
    """Tests for slugify."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Clothing", "clothing"),
            ("Shirts & Tops", "shirts-tops"),
            ("Apparel & Accessories", "apparel-accessories"),
            ("  Mobile   Phones ", "mobile-phones"),
            ("Café Crème", "cafe-creme"),
            ("64 GB", "64-gb"),
        ],
    )
    def test_slugify(self, text: str, expected: str) -> None:
        """Text becomes a lowercase hyphenated slug."""
        assert slugify(text) == expected


class TestCategoryTree:
    """Tests for CategoryTree."""

    @pytest.fixture
    def tree(self) -> CategoryTree:
        """Parse the embedded taxonomy."""
        return CategoryTree.parse(EMBEDDED_TAXONOMY.splitlines())

    def test_parse_embedded_taxonomy(self, tree: CategoryTree) -> None:
        """All categories are parsed with paths and levels."""
        assert len(tree.get_all()) == 12

        shirts = tree.get_by_slug("shirts-tops")
        assert shirts is not None
        assert shirts.id == "5322"
        assert shirts.full_path == "Apparel & Accessories > Clothing > Shirts & Tops"
        assert shirts.level == 3
        assert shirts.parent_id == "1604"

    def test_leaf_categories(self, tree: CategoryTree) -> None:
        """Leaves are categories without children."""
        leaves = {c.name for c in tree.get_leaf_categories()}
        assert leaves == {
            "Shirts & Tops",
            "Pants",
            "Dresses",
            "Outerwear",
            "Shoes",
            "Handbags & Wallets",
            "Mobile Phones",
            "Laptops",
            "Headphones",
        }

    def test_parse_skips_malformed_lines(self) -> None:
        """Comments, blanks and lines without an ID are skipped."""
        tree = CategoryTree.parse(
            [
                "# Google Product Taxonomy",
                "",
                "no id here",
                "1 - Root",
                "2 - Root > Child",
            ]
        )
        assert [c.slug for c in tree.get_all()] == ["root", "child"]

    def test_parse_disambiguates_duplicate_names(self) -> None:
        """A repeated leaf name gets a slug from its full path."""
        tree = CategoryTree.parse(
            [
                "1 - Women",
                "2 - Women > Shoes",
                "3 - Men",
                "4 - Men > Shoes",
            ]
        )
        assert tree.get_by_slug("shoes").id == "2"
        assert tree.get_by_slug("men-shoes").id == "4"

    def test_duplicate_slug_rejected(self) -> None:
        """Adding a category with a taken slug fails."""
        tree = CategoryTree([Category(id="1", name="Shoes", slug="shoes")])
        with pytest.raises(ValueError, match="Duplicate category slug"):
            tree.add(Category(id="2", name="Shoes", slug="shoes"))

    def test_children_linked_in_any_order(self) -> None:
        """Children added before their parent are linked on insertion."""
        tree = CategoryTree(
            [
                Category(id="2", name="Child", slug="child", parent_id="1"),
                Category(id="1", name="Root", slug="root"),
            ]
        )
        root = tree.get_by_id("1")
        assert [c.id for c in root.children] == ["2"]

    def test_descendants_depth_first(self, tree: CategoryTree) -> None:
        """Descendants are listed depth-first."""
        apparel = tree.get_by_slug("apparel-accessories")
        names = [c.name for c in tree.descendants(apparel)]
        assert names[:3] == ["Clothing", "Shirts & Tops", "Pants"]
        assert len(names) == 7

    def test_resolve_scope_includes_descendants(self, tree: CategoryTree) -> None:
        """A scope covers the category and every subcategory."""
        scope = tree.resolve_scope("clothing")
        assert scope is not None
        assert scope.category_ids == {"1604", "5322", "204", "2271", "5598"}
        assert scope.contains("5322")
        assert not scope.contains("187")

    def test_resolve_all(self, tree: CategoryTree) -> None:
        """The 'all' slug covers the whole catalog."""
        scope = tree.resolve_scope("all")
        assert len(scope.category_ids) == 12

    def test_resolve_unknown(self, tree: CategoryTree) -> None:
        """Unknown slugs resolve to None."""
        assert tree.resolve_scope("garden") is None
