"""Command-line interface for the portfolio CMS.

Environment variables:
    PORTFOLIO_CMS_DATABASE: Path to the SQLite storage file
    PORTFOLIO_CMS_PASSCODE: Admin passcode (otherwise use --passcode)
    PORTFOLIO_CMS_QUOTA_BYTES: Storage quota in bytes
    PORTFOLIO_CMS_LOG_LEVEL: Logging level name
"""

import argparse
import asyncio
import getpass
import os
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from tqdm import tqdm

from .auth import AdminSession
from .config import Settings, load_settings
from .context import CMSContext
from .core.models import ArchiveItem, Category, Project, ProjectStatus, enum_text, new_archive_id
from .errors import CMSError
from .logger import setup_logging
from .media.codec import CodecPreset
from .media.ingest import IngestStatus
from .storage.backup import export_state, import_backup


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _settings(args) -> Settings:
    settings = load_settings(args.config)
    if args.database:
        settings.database = Path(args.database)
    return settings


def _require_admin(args, settings: Settings) -> None:
    attempt = args.passcode or os.environ.get("PORTFOLIO_CMS_PASSCODE")
    if attempt is None:
        attempt = getpass.getpass("Passkey: ")
    if not AdminSession(settings.passcode).authenticate(attempt):
        print("Error: access denied")
        sys.exit(1)


def _confirm(args, prompt: str) -> bool:
    if args.yes:
        return True
    return input(f"{prompt} [y/N] ").strip().lower() in ("y", "yes")


def _report_write_error(error: Exception) -> None:
    tqdm.write(f"CRITICAL: {error}")


def _run(args, handler, admin: bool = True) -> None:
    """Open a session, run handler(args, ctx) and flush pending writes."""
    try:
        settings = _settings(args)
    except CMSError as e:
        print(f"Error: {e}")
        sys.exit(1)
    setup_logging(settings.log_level)
    if admin:
        _require_admin(args, settings)

    async def session() -> bool:
        ctx = CMSContext.open(settings, on_warning=tqdm.write, on_error=_report_write_error)
        try:
            await handler(args, ctx)
        finally:
            saved = await ctx.close()
        return saved

    try:
        saved = asyncio.run(session())
    except CMSError as e:
        print(f"Error: {e}")
        sys.exit(1)
    if not saved:
        print("Error: changes were not saved")
        sys.exit(1)


async def _upload(ctx: CMSContext, paths: list[str], preset: CodecPreset) -> list[str]:
    """Encode image files with a progress bar; returns data URLs in input order."""
    if not paths:
        return []
    with tqdm(total=len(paths), desc="Processing", unit="img") as bar:
        report = await ctx.media.process(paths, preset, progress=lambda outcome: bar.update(1))
    for outcome in report.skipped:
        if outcome.status is IngestStatus.DECODE_FAILED:
            tqdm.write(f"Warning: could not decode {outcome.filename}")
    return report.encoded


def _human_size(size: int) -> str:
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def _iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value}")


def _non_blank(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("mandatory value is missing")
    return value


def _find(items, item_id: str, kind: str):
    for item in items:
        if item.id == item_id:
            return item
    raise CMSError(f"{kind} not found: {item_id}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def show(args, ctx: CMSContext):
    """Show site metadata and collection sizes."""
    state = ctx.store.state
    print(f"Title:    {state.site_title}")
    print(f"Tagline:  {state.tagline}")
    print(f"Projects: {len(state.projects)}")
    print(f"Archive:  {len(state.archive_items)}")
    print(f"Services: {len(state.services)}")
    print(f"Storage:  {_human_size(ctx.storage.used_bytes())} / {_human_size(ctx.storage.quota_bytes)}")


async def list_items(args, ctx: CMSContext):
    """List projects, archive items or services."""
    state = ctx.store.state
    if args.collection == "projects":
        print(f"{'ID':<20} {'Status':<12} {'Category':<10} {'Date':<11} {'Images':>6}  Title")
        print("-" * 80)
        for p in state.projects:
            print(f"{p.id:<20} {enum_text(p.status):<12} {enum_text(p.category):<10} {p.date:<11} {len(p.image_urls):>6}  {p.title}")
        print(f"\nTotal: {len(state.projects)} project(s)")
    elif args.collection == "archive":
        print(f"{'ID':<34} {'Year':<16} {'Company':<20} Project")
        print("-" * 80)
        for a in state.archive_items:
            print(f"{a.id:<34} {a.year:<16} {a.company:<20} {a.project}")
        print(f"\nTotal: {len(state.archive_items)} archive item(s)")
    else:
        for s in state.services:
            print(f"{s.number}  {s.title}\n    {s.description}")


async def add_project(args, ctx: CMSContext):
    """Create a project, uploading its gallery images first."""
    image_urls = await _upload(ctx, args.images, ctx.gallery_preset)
    project = Project(
        id=args.id,
        title=args.title,
        category=Category(args.category),
        client=args.client,
        status=ProjectStatus(args.status),
        date=args.date or date.today().isoformat(),
        description=args.description,
        image_urls=tuple(image_urls),
    )
    ctx.store.add_project(project)
    print(f"Added project {project.id} ({len(image_urls)} image(s))")


async def update_project(args, ctx: CMSContext):
    """Edit project fields and its gallery."""
    current = _find(ctx.store.state.projects, args.id, "Project")
    image_urls = list(current.image_urls)
    for index in sorted(set(args.remove_image or []), reverse=True):
        if not 0 <= index < len(image_urls):
            raise CMSError(f"No image at index {index}")
        del image_urls[index]
    image_urls.extend(await _upload(ctx, args.add_image or [], ctx.gallery_preset))

    changes = {
        "id": args.new_id,
        "title": args.title,
        "category": Category(args.category) if args.category else None,
        "client": args.client,
        "status": ProjectStatus(args.status) if args.status else None,
        "date": args.date,
        "description": args.description,
    }
    updated = replace(
        current,
        image_urls=tuple(image_urls),
        **{k: v for k, v in changes.items() if v is not None},
    )
    ctx.store.update_project(args.id, updated)
    print(f"Updated project {updated.id}")


async def delete_project(args, ctx: CMSContext):
    _find(ctx.store.state.projects, args.id, "Project")
    if not _confirm(args, f"Confirm deletion: {args.id}?"):
        print("Cancelled")
        return
    ctx.store.delete_project(args.id)
    print(f"Deleted project {args.id}")


async def add_archive(args, ctx: CMSContext):
    """Create an archive log entry with an optional thumbnail."""
    image_url = ""
    if args.image:
        image_url = await ctx.media.ingest_one(args.image, ctx.thumbnail_preset)
    item = ArchiveItem(
        id=new_archive_id(),
        year=args.year,
        company=args.company,
        category=args.category,
        project=args.project,
        image_url=image_url,
    )
    ctx.store.add_archive_item(item)
    print(f"Added archive item {item.id}")


async def update_archive(args, ctx: CMSContext):
    current = _find(ctx.store.state.archive_items, args.id, "Archive item")
    changes = {
        "year": args.year,
        "company": args.company,
        "category": args.category,
        "project": args.project,
    }
    updated = replace(current, **{k: v for k, v in changes.items() if v is not None})
    if args.clear_image:
        updated = replace(updated, image_url="")
    elif args.image:
        image_url = await ctx.media.ingest_one(args.image, ctx.thumbnail_preset)
        if image_url:
            updated = replace(updated, image_url=image_url)
    ctx.store.update_archive_item(args.id, updated)
    print(f"Updated archive item {args.id}")


async def delete_archive(args, ctx: CMSContext):
    _find(ctx.store.state.archive_items, args.id, "Archive item")
    if not _confirm(args, "Confirm deletion of log record?"):
        print("Cancelled")
        return
    ctx.store.delete_archive_item(args.id)
    print(f"Deleted archive item {args.id}")


async def settings(args, ctx: CMSContext):
    state = ctx.store.state
    title = args.title if args.title is not None else state.site_title
    tagline = args.tagline if args.tagline is not None else state.tagline
    ctx.store.update_settings(title, tagline)
    print("Settings updated")


async def export(args, ctx: CMSContext):
    path = export_state(ctx.store.state, args.output_dir)
    print(f"Exported to {path}")


async def import_(args, ctx: CMSContext):
    if not _confirm(args, "Overwrite current database?"):
        print("Cancelled")
        return
    import_backup(args.file, ctx.storage, ctx.settings.storage_key)
    ctx.reload()
    state = ctx.store.state
    print(f"Imported {len(state.projects)} project(s), {len(state.archive_items)} archive item(s)")


async def usage(args, ctx: CMSContext):
    """Show how much of the storage quota each item's images use."""
    state = ctx.store.state
    used, quota = ctx.storage.used_bytes(), ctx.storage.quota_bytes
    print(f"Used {_human_size(used)} of {_human_size(quota)} ({used / max(quota, 1):.0%})\n")
    rows = [(sum(len(u) for u in p.image_urls), f"project {p.id}") for p in state.projects]
    rows += [(len(a.image_url), f"archive {a.company} ({a.id})") for a in state.archive_items]
    for size, label in sorted(rows, reverse=True)[: args.limit]:
        print(f"{_human_size(size):>10}  {label}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(
        description="Portfolio CMS - manage projects, archive log and site settings",
        epilog="Environment variables: PORTFOLIO_CMS_DATABASE, PORTFOLIO_CMS_PASSCODE, "
               "PORTFOLIO_CMS_QUOTA_BYTES, PORTFOLIO_CMS_LOG_LEVEL",
    )
    parser.add_argument("--config", "-c", help="Path to YAML config file")
    parser.add_argument("--database", "-d", help="Path to SQLite storage (default: data/portfolio.db)")
    parser.add_argument("--passcode", "-p", help="Admin passcode for commands that change data")

    subparsers = parser.add_subparsers(dest="command", required=True)
    categories = [c.value for c in Category]
    statuses = [s.value for s in ProjectStatus]

    # --- show ---
    show_parser = subparsers.add_parser("show", help="Show site settings and totals")
    show_parser.set_defaults(func=show, admin=False)

    # --- list ---
    list_parser = subparsers.add_parser("list", help="List a collection")
    list_parser.add_argument("collection", choices=["projects", "archive", "services"])
    list_parser.set_defaults(func=list_items, admin=False)

    # --- add-project ---
    add_parser = subparsers.add_parser("add-project", help="Create a project")
    add_parser.add_argument("--id", required=True, type=_non_blank, help="Project reference, e.g. ODM-PRJ-2024-001")
    add_parser.add_argument("--title", required=True, type=_non_blank)
    add_parser.add_argument("--category", choices=categories, default=Category.BRANDING.value)
    add_parser.add_argument("--client", default="")
    add_parser.add_argument("--status", choices=statuses, default=ProjectStatus.IN_PROGRESS.value)
    add_parser.add_argument("--date", type=_iso_date, help="ISO date (default: today)")
    add_parser.add_argument("--description", default="")
    add_parser.add_argument("images", nargs="*", help="Gallery image files")
    add_parser.set_defaults(func=add_project, admin=True)

    # --- update-project ---
    upd_parser = subparsers.add_parser("update-project", help="Edit a project")
    upd_parser.add_argument("id")
    upd_parser.add_argument("--new-id", type=_non_blank)
    upd_parser.add_argument("--title", type=_non_blank)
    upd_parser.add_argument("--category", choices=categories)
    upd_parser.add_argument("--client")
    upd_parser.add_argument("--status", choices=statuses)
    upd_parser.add_argument("--date", type=_iso_date)
    upd_parser.add_argument("--description")
    upd_parser.add_argument("--add-image", nargs="+", metavar="FILE", help="Append gallery images")
    upd_parser.add_argument("--remove-image", type=int, action="append", metavar="INDEX",
                            help="Remove the gallery image at INDEX (repeatable)")
    upd_parser.set_defaults(func=update_project, admin=True)

    # --- delete-project ---
    del_parser = subparsers.add_parser("delete-project", help="Delete a project")
    del_parser.add_argument("id")
    del_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    del_parser.set_defaults(func=delete_project, admin=True)

    # --- add-archive ---
    arc_parser = subparsers.add_parser("add-archive", help="Create an archive log entry")
    arc_parser.add_argument("--year", required=True, type=_non_blank, help="Year or range, e.g. '2015 - Present'")
    arc_parser.add_argument("--company", required=True, type=_non_blank)
    arc_parser.add_argument("--category", default="")
    arc_parser.add_argument("--project", default="")
    arc_parser.add_argument("--image", help="Thumbnail image file")
    arc_parser.set_defaults(func=add_archive, admin=True)

    # --- update-archive ---
    uarc_parser = subparsers.add_parser("update-archive", help="Edit an archive log entry")
    uarc_parser.add_argument("id")
    uarc_parser.add_argument("--year", type=_non_blank)
    uarc_parser.add_argument("--company", type=_non_blank)
    uarc_parser.add_argument("--category")
    uarc_parser.add_argument("--project")
    image_group = uarc_parser.add_mutually_exclusive_group()
    image_group.add_argument("--image", help="Replace the thumbnail")
    image_group.add_argument("--clear-image", action="store_true", help="Remove the thumbnail")
    uarc_parser.set_defaults(func=update_archive, admin=True)

    # --- delete-archive ---
    darc_parser = subparsers.add_parser("delete-archive", help="Delete an archive log entry")
    darc_parser.add_argument("id")
    darc_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    darc_parser.set_defaults(func=delete_archive, admin=True)

    # --- settings ---
    set_parser = subparsers.add_parser("settings", help="Change site title and tagline")
    set_parser.add_argument("--title")
    set_parser.add_argument("--tagline")
    set_parser.set_defaults(func=settings, admin=True)

    # --- export ---
    exp_parser = subparsers.add_parser("export", help="Export the dataset as JSON")
    exp_parser.add_argument("--output-dir", "-o", default=".", help="Directory for the export file (default: .)")
    exp_parser.set_defaults(func=export, admin=True)

    # --- import ---
    imp_parser = subparsers.add_parser("import", help="Replace the dataset with a JSON backup")
    imp_parser.add_argument("file")
    imp_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    imp_parser.set_defaults(func=import_, admin=True)

    # --- usage ---
    usage_parser = subparsers.add_parser("usage", help="Show storage use per item")
    usage_parser.add_argument("--limit", "-n", type=int, default=10, help="Rows to show (default: 10)")
    usage_parser.set_defaults(func=usage, admin=False)

    args = parser.parse_args()
    _run(args, args.func, admin=args.admin)


if __name__ == "__main__":
    main()
