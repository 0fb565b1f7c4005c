"""Tag commands for Trade Journal CLI.

Handles the tag catalog, tag relationships and checking a tag
selection for conflicts.
"""

import re
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.analytics.tags import group_by_category, refresh_usage, validate_tag_selection
from tradejournal.cli.common import fail, get_config, get_data_store
from tradejournal.cli.main import console
from tradejournal.models import CustomTag


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _resolve(catalog: list[CustomTag], ref: str) -> CustomTag:
    """Find a tag by id or by case-insensitive name."""
    for tag in catalog:
        if tag.id == ref:
            return tag
    for tag in catalog:
        if tag.name.lower() == ref.lower():
            return tag
    raise ValueError(f"Unknown tag: {ref}")


@click.command()
@click.pass_context
def tags(ctx: click.Context) -> None:
    """List tags grouped by category with usage counts.

    \b
    Examples:
      tradejournal tags
    """
    try:
        store = get_data_store(get_config(ctx))
        catalog = store.load_tags()
        categories = store.load_categories(kind="tag")
        catalog, _ = refresh_usage(catalog, [], store.load_trades())
    except ValueError as e:
        fail(f"Failed to load tags:\n\n{e}")

    if not catalog:
        console.print(Panel(
            "[dim]No tags defined[/dim]\n\n"
            "Run [cyan]tradejournal tag-add NAME[/cyan] to create one.",
            title="[bold]Tags[/bold]",
            border_style="dim",
        ))
        return

    names = {tag.id: tag.name for tag in catalog}
    for group in group_by_category(catalog, categories).values():
        if not group.items:
            continue
        table = Table(title=group.category.name, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Tag", style="bold")
        table.add_column("Uses", justify="right")
        table.add_column("Excludes")
        table.add_column("Suggests")
        for tag in group.items:
            rel = tag.relationships
            label = tag.name if tag.is_active else f"[dim]{tag.name} (inactive)[/dim]"
            table.add_row(
                tag.id,
                f"★ {label}" if tag.is_favorite else label,
                str(tag.usage_count),
                ", ".join(names.get(i, i) for i in rel.mutually_exclusive_with) or "-",
                ", ".join(names.get(i, i) for i in rel.suggested_with) or "-",
            )
        console.print(table)


@click.command(name="tag-add")
@click.argument("name")
@click.option("--id", "tag_id", default=None, help="Tag ID (default derived from name).")
@click.option("--description", default=None, help="Tag description.")
@click.option("--color", default=None, help="Hex color.")
@click.option("--category", "category_id", default=None, help="Category ID.")
@click.option("--favorite", is_flag=True, default=False, help="Pin the tag.")
@click.pass_context
def tag_add(
    ctx: click.Context,
    name: str,
    tag_id: Optional[str],
    description: Optional[str],
    color: Optional[str],
    category_id: Optional[str],
    favorite: bool,
) -> None:
    """Create or update a tag.

    \b
    Examples:
      tradejournal tag-add FOMO --description "Entered out of fear of missing out"
    """
    try:
        store = get_data_store(get_config(ctx))
        tag = CustomTag(
            id=tag_id or _slugify(name),
            name=name,
            description=description,
            color=color,
            category_id=category_id,
            is_favorite=favorite,
        )
        store.save_tag(tag)
    except ValueError as e:
        fail(f"Failed to save tag:\n\n{e}")

    console.print(f"[green]Saved tag[/green] [bold]{tag.name}[/bold] [dim]({tag.id})[/dim]")


@click.command(name="tag-relate")
@click.argument("tag_ref")
@click.option("--excludes", multiple=True, help="Tag that cannot be combined (repeatable).")
@click.option("--suggests", multiple=True, help="Tag to suggest alongside (repeatable).")
@click.option("--requires", multiple=True, help="Tag that should accompany it (repeatable).")
@click.option("--replace", is_flag=True, default=False, help="Replace existing relationships.")
@click.pass_context
def tag_relate(
    ctx: click.Context,
    tag_ref: str,
    excludes: tuple[str, ...],
    suggests: tuple[str, ...],
    requires: tuple[str, ...],
    replace: bool,
) -> None:
    """Set relationships of a tag.

    Exclusions are stored symmetrically: if A excludes B, B excludes A.

    \b
    Examples:
      tradejournal tag-relate fomo --excludes patient --suggests revenge
    """
    try:
        store = get_data_store(get_config(ctx))
        catalog = store.load_tags()
        tag = _resolve(catalog, tag_ref)

        def ids(refs: tuple[str, ...], existing: list[str]) -> list[str]:
            merged = [] if replace else list(existing)
            for ref in refs:
                other = _resolve(catalog, ref).id
                if other != tag.id and other not in merged:
                    merged.append(other)
            return merged

        rel = tag.relationships
        updated = tag.model_copy(update={"relationships": rel.model_copy(update={
            "mutually_exclusive_with": ids(excludes, rel.mutually_exclusive_with),
            "suggested_with": ids(suggests, rel.suggested_with),
            "required_with": ids(requires, rel.required_with),
        })})
        store.save_tags(
            [updated if t.id == tag.id else t for t in catalog],
            normalize=True,
        )
    except ValueError as e:
        fail(str(e))

    console.print(f"[green]Updated relationships of[/green] [bold]{tag.name}[/bold]")


@click.command(name="tag-check")
@click.argument("candidate")
@click.option("--with", "selected", multiple=True, help="Tag already selected (repeatable).")
@click.pass_context
def tag_check(ctx: click.Context, candidate: str, selected: tuple[str, ...]) -> None:
    """Check whether a tag can join a selection.

    Exits with status 1 when the tag conflicts with the selection.

    \b
    Examples:
      tradejournal tag-check patient --with fomo --with breakout
    """
    try:
        catalog = get_data_store(get_config(ctx)).load_tags()
        candidate_tag = _resolve(catalog, candidate)
        selected_ids = [_resolve(catalog, ref).id for ref in selected]
    except ValueError as e:
        fail(str(e))

    result = validate_tag_selection(selected_ids, candidate_tag.id, catalog)

    lines = []
    if result.suggestions:
        lines.append(f"Suggested: [cyan]{', '.join(result.suggestions)}[/cyan]")
    if result.required:
        lines.append(f"Required:  [yellow]{', '.join(result.required)}[/yellow]")

    if not result.is_valid:
        fail(
            f"{candidate_tag.name} conflicts with: {', '.join(result.conflicts)}",
            title="Tag Conflict",
        )

    console.print(Panel(
        "\n".join([f"[green]{candidate_tag.name} can be added.[/green]"] + lines),
        title="[bold cyan]Tag Check[/bold cyan]",
        border_style="cyan",
    ))
