"""Tag relationship validation and catalog helpers.

Relationship sets are authored per tag and are not guaranteed to be
symmetric, so exclusion conflicts are checked in both directions.
"""

from collections import defaultdict
from typing import Iterable, Sequence, TypeVar, Union

from pydantic import BaseModel, Field

from tradejournal.analytics.statistics import is_win, safe_ratio
from tradejournal.models import Category, CustomSetup, CustomTag, Trade

UNCATEGORIZED = "uncategorized"

CatalogItem = TypeVar("CatalogItem", CustomTag, CustomSetup)


class TagValidationResult(BaseModel):
    """Outcome of adding a candidate tag to a selection."""

    is_valid: bool = Field(default=True, description="No exclusion conflicts")
    conflicts: list[str] = Field(default_factory=list, description="Conflicting tag names")
    suggestions: list[str] = Field(
        default_factory=list, description="Unselected suggested tag names"
    )
    required: list[str] = Field(
        default_factory=list, description="Unselected required tag names"
    )

    model_config = {"frozen": True}


class CategoryGroup(BaseModel):
    """Catalog items belonging to one category."""

    category: Category
    items: list[Union[CustomTag, CustomSetup]] = Field(default_factory=list)

    model_config = {"frozen": True}


def validate_tag_selection(
    selected_tag_ids: Iterable[str],
    candidate_id: str,
    catalog: Sequence[CustomTag],
) -> TagValidationResult:
    """Check what happens if ``candidate_id`` joins the selection.

    Args:
        selected_tag_ids: Ids of tags already selected.
        candidate_id: Id of the tag being added.
        catalog: All known tags.

    Returns:
        A result naming conflicting tags and the unselected active tags the
        candidate suggests or requires. An unknown candidate is valid.
    """
    selected = set(selected_tag_ids)
    by_id = {tag.id: tag for tag in catalog}
    candidate = by_id.get(candidate_id)
    if candidate is None:
        return TagValidationResult()

    selected_tags = [tag for tag in catalog if tag.id in selected]
    excluded_by_candidate = set(candidate.relationships.mutually_exclusive_with)

    conflicts: list[str] = []
    for tag in selected_tags:
        if tag.id in excluded_by_candidate and tag.name not in conflicts:
            conflicts.append(tag.name)
    for tag in selected_tags:
        if candidate_id in tag.relationships.mutually_exclusive_with and tag.name not in conflicts:
            conflicts.append(tag.name)

    def unselected(ids: list[str]) -> list[str]:
        wanted = set(ids)
        return [
            tag.name
            for tag in catalog
            if tag.id in wanted and tag.id not in selected and tag.is_active
        ]

    return TagValidationResult(
        is_valid=not conflicts,
        conflicts=conflicts,
        suggestions=unselected(candidate.relationships.suggested_with),
        required=unselected(candidate.relationships.required_with),
    )


def get_suggested_tags(
    selected_tag_ids: Iterable[str], catalog: Sequence[CustomTag]
) -> list[CustomTag]:
    """Active, unselected tags suggested by any selected tag, in catalog order."""
    selected = set(selected_tag_ids)
    suggested: set[str] = set()
    for tag in catalog:
        if tag.id in selected:
            suggested.update(tag.relationships.suggested_with)
    return [
        tag for tag in catalog
        if tag.id in suggested and tag.id not in selected and tag.is_active
    ]


def symmetrize_exclusions(catalog: Sequence[CustomTag]) -> list[CustomTag]:
    """Return a catalog whose mutual-exclusion sets are symmetric.

    Every "A excludes B" edge also becomes "B excludes A". Edges to unknown
    ids are kept as authored. Suggested and required sets are left alone.
    """
    known = {tag.id for tag in catalog}
    reverse: dict[str, list[str]] = defaultdict(list)
    for tag in catalog:
        for other in tag.relationships.mutually_exclusive_with:
            if other in known:
                reverse[other].append(tag.id)

    normalized = []
    for tag in catalog:
        exclusions = list(tag.relationships.mutually_exclusive_with)
        for other in reverse[tag.id]:
            if other not in exclusions:
                exclusions.append(other)
        relationships = tag.relationships.model_copy(
            update={"mutually_exclusive_with": exclusions}
        )
        normalized.append(tag.model_copy(update={"relationships": relationships}))
    return normalized


def calculate_tag_stats(tag: CustomTag, trades: Iterable[Trade]) -> CustomTag:
    """Recompute the usage counter of a tag from its name on trades."""
    usage = sum(1 for trade in trades if tag.name in trade.tags)
    return tag.model_copy(update={"usage_count": usage})


def calculate_setup_stats(setup: CustomSetup, trades: Iterable[Trade]) -> CustomSetup:
    """Recompute usage and performance counters of a setup over closed trades."""
    related = [t for t in trades if t.setup == setup.name and t.is_closed]
    if not related:
        return setup.model_copy(
            update={"usage_count": 0, "win_rate": None, "avg_rr": None, "total_pnl": 0.0}
        )
    with_rr = [t.rr for t in related if t.rr is not None]
    return setup.model_copy(
        update={
            "usage_count": len(related),
            "win_rate": safe_ratio(sum(1 for t in related if is_win(t)), len(related)) * 100,
            "avg_rr": safe_ratio(sum(with_rr), len(with_rr)) if with_rr else None,
            "total_pnl": sum(t.pnl for t in related),
        }
    )


def refresh_usage(
    tags: Sequence[CustomTag],
    setups: Sequence[CustomSetup],
    trades: Iterable[Trade],
) -> tuple[list[CustomTag], list[CustomSetup]]:
    """Recompute every derived counter from a trade snapshot."""
    trades = list(trades)
    return (
        [calculate_tag_stats(tag, trades) for tag in tags],
        [calculate_setup_stats(setup, trades) for setup in setups],
    )


def group_by_category(
    items: Sequence[CatalogItem], categories: Sequence[Category]
) -> dict[str, CategoryGroup]:
    """Group tags or setups by active category, keeping category order.

    Items without a category, or whose category is inactive or unknown, go
    to a trailing ``uncategorized`` group that only exists when needed.
    """
    active = [c for c in categories if c.is_active]
    active_ids = {c.id for c in active}
    groups = {
        category.id: CategoryGroup(
            category=category,
            items=[item for item in items if item.category_id == category.id],
        )
        for category in active
    }
    leftovers = [item for item in items if item.category_id not in active_ids]
    if leftovers:
        kind = "setup" if isinstance(leftovers[0], CustomSetup) else "tag"
        groups[UNCATEGORIZED] = CategoryGroup(
            category=Category(id=UNCATEGORIZED, name="Uncategorized", kind=kind, color="#64748b"),
            items=leftovers,
        )
    return groups
