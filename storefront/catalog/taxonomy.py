"""Category tree and catalog scope resolution.

Facets are computed over a category together with all of its descendants.
The special slug ``all`` scopes the whole catalog.

Taxonomy text format (one category per line):
    1 - Apparel
    2 - Apparel > Clothing
    3 - Apparel > Clothing > Shirts & Tops
"""

import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

ALL_CATEGORIES = "all"


def slugify(text: str) -> str:
    """Convert text to a URL-safe slug.

    Args:
        text: Text to convert (e.g., "Shirts & Tops").

    Returns:
        Slug (e.g., "shirts-tops").
    """
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


@dataclass(eq=False)
class Category:
    """A catalog category.

    Attributes:
        id: Category ID.
        name: Category name (leaf part).
        slug: URL-safe identifier.
        full_path: Full category path (e.g., "Apparel > Clothing").
        parent_id: ID of parent category (None for root).
        level: Depth in tree (1 = root).
    """

    id: str
    name: str
    slug: str
    full_path: str = ""
    parent_id: str | None = None
    level: int = 1
    children: list["Category"] = field(default_factory=list, repr=False)

    @property
    def path_parts(self) -> list[str]:
        """Get list of path components."""
        return [part.strip() for part in (self.full_path or self.name).split(">")]


@dataclass(frozen=True)
class CategoryScope:
    """A resolved facet scope: a category plus all descendants.

    Attributes:
        slug: Requested category slug.
        category_ids: IDs of the category and every descendant.
    """

    slug: str
    category_ids: frozenset[str]

    def contains(self, category_id: str) -> bool:
        """Check if a category falls inside the scope."""
        return category_id in self.category_ids


class CategoryTree:
    """In-memory category hierarchy.

    Example usage:
        tree = CategoryTree.parse(EMBEDDED_TAXONOMY.splitlines())
        scope = tree.resolve_scope("clothing")
        scope.category_ids  # clothing and every subcategory
    """

    def __init__(self, categories: Iterable[Category] = ()) -> None:
        """Initialize tree.

        Args:
            categories: Categories with parent_id set. Children are linked here.
        """
        self._categories: dict[str, Category] = {}
        self._by_slug: dict[str, Category] = {}
        for category in categories:
            self.add(category)

    def add(self, category: Category) -> Category:
        """Add a category, linking it under its parent when present.

        Args:
            category: Category to add.

        Returns:
            The added category.

        Raises:
            ValueError: If the slug is already used.
        """
        if category.slug in self._by_slug:
            raise ValueError(f"Duplicate category slug '{category.slug}'")

        self._categories[category.id] = category
        self._by_slug[category.slug] = category

        if category.parent_id is not None:
            parent = self._categories.get(category.parent_id)
            if parent is not None:
                parent.children.append(category)
                category.level = parent.level + 1
        # Link previously added orphans whose parent is this category
        for other in self._categories.values():
            if other.parent_id == category.id and all(c is not other for c in category.children):
                category.children.append(other)
        return category

    @classmethod
    def parse(cls, lines: Iterable[str]) -> "CategoryTree":
        """Parse taxonomy lines ("ID - Root > Child").

        Malformed lines are skipped.

        Args:
            lines: Lines in taxonomy format.

        Returns:
            Populated tree.
        """
        tree = cls()
        by_path: dict[str, Category] = {}

        for line in lines:
            line = line.strip()
            if not line or line.startswith("#") or " - " not in line:
                continue

            id_part, path_part = line.split(" - ", 1)
            parts = [p.strip() for p in path_part.split(">")]
            full_path = " > ".join(parts)
            parent = by_path.get(" > ".join(parts[:-1])) if len(parts) > 1 else None

            slug = slugify(parts[-1])
            if slug in tree._by_slug:
                slug = slugify(full_path)

            category = tree.add(
                Category(
                    id=id_part.strip(),
                    name=parts[-1],
                    slug=slug,
                    full_path=full_path,
                    parent_id=parent.id if parent else None,
                    level=len(parts),
                )
            )
            by_path[full_path] = category

        return tree

    @classmethod
    def parse_file(cls, path: str | Path) -> "CategoryTree":
        """Parse taxonomy from file."""
        with open(path, encoding="utf-8") as f:
            return cls.parse(f.readlines())

    def get_by_id(self, category_id: str) -> Category | None:
        """Get category by ID."""
        return self._categories.get(category_id)

    def get_by_slug(self, slug: str) -> Category | None:
        """Get category by slug."""
        return self._by_slug.get(slug)

    def get_all(self) -> list[Category]:
        """Get all categories."""
        return list(self._categories.values())

    def get_leaf_categories(self) -> list[Category]:
        """Get categories with no children."""
        return [c for c in self._categories.values() if not c.children]

    def descendants(self, category: Category) -> list[Category]:
        """Get every descendant of a category, depth-first.

        Args:
            category: Root of the subtree.

        Returns:
            Descendants, excluding the category itself.
        """
        result: list[Category] = []
        stack = list(reversed(category.children))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(current.children))
        return result

    def resolve_scope(self, slug: str) -> CategoryScope | None:
        """Resolve a category slug into a facet scope.

        Args:
            slug: Category slug, or "all" for the whole catalog.

        Returns:
            Scope with the category and all descendants, None if unknown.
        """
        if slug == ALL_CATEGORIES:
            return CategoryScope(slug=slug, category_ids=frozenset(self._categories))

        category = self._by_slug.get(slug)
        if category is None:
            return None

        ids = {category.id} | {c.id for c in self.descendants(category)}
        return CategoryScope(slug=slug, category_ids=frozenset(ids))
