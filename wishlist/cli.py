from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Annotated, Any

import typer

from wishlist.core.config import settings
from wishlist.core.logging import configure_logging
from wishlist.schemas import UNCATEGORIZED
from wishlist.services import catalog
from wishlist.services.icons import CategoryIcon, resolve_icon
from wishlist.services.preview import PreviewExtractor, get_preview_extractor
from wishlist.sync.scheduler import AddItemError, PreviewSource, SyncScheduler

app = typer.Typer(add_completion=False, help="Manage a wishlist from the shell.")

SchedulerFactory = Callable[[], SyncScheduler]

_scheduler_factory: SchedulerFactory | None = None


def set_scheduler_factory(factory: SchedulerFactory | None) -> None:
    global _scheduler_factory
    _scheduler_factory = factory


def _local_preview_source() -> PreviewSource:
    extractor = get_preview_extractor()

    def _extract(url: str) -> dict[str, Any]:
        return extractor.extract(url).as_dict()

    return _extract


def _build_scheduler(*, offline_preview: bool = False) -> SyncScheduler:
    if _scheduler_factory is not None:
        return _scheduler_factory()
    preview_source = _local_preview_source() if offline_preview else None
    return SyncScheduler.from_settings(settings, preview_source=preview_source)


@contextmanager
def _session(*, offline_preview: bool = False) -> Iterator[SyncScheduler]:
    """Merge with the shared store, yield, then push any pending changes."""

    scheduler = _build_scheduler(offline_preview=offline_preview)
    scheduler.start()
    try:
        yield scheduler
    finally:
        scheduler.close(flush=True)


def _require_item(scheduler: SyncScheduler, item_id: str) -> None:
    if scheduler.state.find(item_id) is None:
        typer.echo(f"Item not found: {item_id}")
        raise typer.Exit(code=1)


@app.callback()
def main() -> None:
    configure_logging()


@app.command()
def preview(
    url: Annotated[str, typer.Argument(help="Page to preview")],
) -> None:
    """Print the link preview the server would store for URL."""

    extractor: PreviewExtractor = get_preview_extractor()
    typer.echo(json.dumps(extractor.extract(url).as_dict(), indent=2))


@app.command()
def sync() -> None:
    """Merge the local cache with the shared store and write both back."""

    scheduler = _build_scheduler()
    state = scheduler.start()
    typer.echo(
        f"Synced {len(state.items)} items across {len(state.categories)} categories"
    )


@app.command("list")
def list_items(
    category: Annotated[
        str | None,
        typer.Option("--category", help="Only show one category", show_default=False),
    ] = None,
) -> None:
    """List items from the local cache, grouped by category."""

    scheduler = _build_scheduler()
    state = scheduler.load_local()
    counts = catalog.category_counts(state)
    for name in counts:
        if category is not None and name != category:
            continue
        icon = resolve_icon(state.category_icons.get(name))
        typer.echo(f"[{icon.value}] {name} ({counts[name]})")
        for item in catalog.items_in_category(state, name):
            mark = "x" if item.received else " "
            typer.echo(f"  [{mark}] {item.id}  {item.title}  <{item.url}>")


@app.command()
def add(
    url: Annotated[str, typer.Argument(help="Product URL")],
    category: Annotated[
        str,
        typer.Option("--category", help="Category for the new item"),
    ] = UNCATEGORIZED,
    offline: Annotated[
        bool,
        typer.Option(
            "--offline", help="Extract the preview locally instead of via the API"
        ),
    ] = False,
) -> None:
    """Add URL to the wishlist."""

    with _session(offline_preview=offline) as scheduler:
        try:
            item = scheduler.add_item(url, category)
        except AddItemError as exc:
            typer.echo(str(exc))
            raise typer.Exit(code=1) from exc
    typer.echo(f"Added {item.id}: {item.title}")


@app.command()
def toggle(item_id: Annotated[str, typer.Argument(help="Item id")]) -> None:
    """Flip the received flag of an item."""

    with _session() as scheduler:
        _require_item(scheduler, item_id)
        item = scheduler.toggle_received(item_id).find(item_id)
    typer.echo(f"{item_id} received={bool(item and item.received)}")


@app.command()
def delete(item_id: Annotated[str, typer.Argument(help="Item id")]) -> None:
    """Remove an item."""

    with _session() as scheduler:
        _require_item(scheduler, item_id)
        scheduler.delete_item(item_id)
    typer.echo(f"Deleted {item_id}")


@app.command()
def move(
    item_id: Annotated[str, typer.Argument(help="Item id")],
    category: Annotated[str, typer.Argument(help="Target category")],
) -> None:
    """Move an item to another category."""

    with _session() as scheduler:
        _require_item(scheduler, item_id)
        scheduler.change_category(item_id, category)
    typer.echo(f"Moved {item_id} to {category}")


@app.command("create-category")
def create_category(name: Annotated[str, typer.Argument()]) -> None:
    with _session() as scheduler:
        scheduler.create_category(name)
    typer.echo(f"Created category {name}")


@app.command("rename-category")
def rename_category(
    old_name: Annotated[str, typer.Argument()],
    new_name: Annotated[str, typer.Argument()],
) -> None:
    if UNCATEGORIZED in (old_name, new_name):
        typer.echo(f"{UNCATEGORIZED} cannot be renamed")
        raise typer.Exit(code=1)
    with _session() as scheduler:
        scheduler.rename_category(old_name, new_name)
    typer.echo(f"Renamed {old_name} to {new_name}")


@app.command("delete-category")
def delete_category(name: Annotated[str, typer.Argument()]) -> None:
    """Delete a category; its items move to Uncategorized."""

    if name == UNCATEGORIZED:
        typer.echo(f"{UNCATEGORIZED} cannot be deleted")
        raise typer.Exit(code=1)
    with _session() as scheduler:
        moved = len(catalog.items_in_category(scheduler.state, name))
        scheduler.delete_category(name)
    typer.echo(f"Deleted category {name}; moved {moved} item(s) to {UNCATEGORIZED}")


@app.command("set-icon")
def set_icon(
    category: Annotated[str, typer.Argument()],
    icon: Annotated[str, typer.Argument(help="Icon name, e.g. Gift")],
) -> None:
    resolved = resolve_icon(icon)
    if resolved is CategoryIcon.TAG and icon.strip().lower() != "tag":
        typer.echo(f"Unknown icon {icon!r}; using {resolved.value}")
    with _session() as scheduler:
        scheduler.set_category_icon(category, resolved)
    typer.echo(f"{category} icon set to {resolved.value}")


if __name__ == "__main__":
    app()
