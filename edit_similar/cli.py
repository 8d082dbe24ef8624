"""
edit-similar — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action against the SQLite database.
  5. Report result to stdout.

Install and run::

    pip install -e .
    edit-similar --help
    edit-similar init-db
    edit-similar import-pages --file config/pages_example.csv
    edit-similar set-markers "* Stubs * Articles needing cleanup"
    edit-similar recommend --page-id 1
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="edit-similar",
    help="Suggest related pages that need attention after an edit.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    import tomllib

    from pydantic import ValidationError

    from edit_similar.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, tomllib.TOMLDecodeError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from edit_similar.utils.logging import configure_logging
    configure_logging(config.logging)


def _connect(config, db_path: Optional[str] = None):
    from edit_similar.db.connection import get_connection

    return get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


_DB_PATH_OPTION = typer.Option(None, "--db-path", help="Override DB path from config.")
_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Initialize the SQLite database and apply the schema.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from edit_similar.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    typer.echo(f"Initializing database at: {db_path or config.database.db_path}")
    with _connect(config, db_path) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print the full config as JSON."),
) -> None:
    """Validate the configuration file and print parsed values."""
    config = _load_config_or_exit(config_path)
    settings = config.edit_similar

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:      {config.database.db_path}")
    typer.echo(f"  Pool limit:         {settings.pool_limit}")
    typer.echo(f"  Display limit:      {settings.display_limit}")
    typer.echo(f"  Show every N edits: {settings.counter_value}")
    typer.echo(f"  Always thank:       {settings.always_show_thanks}")
    typer.echo(f"  Content namespaces: {', '.join(map(str, settings.content_namespaces))}")
    typer.echo(f"  Log level:          {config.logging.level}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("import-pages")
def import_pages(
    pages_file: str = typer.Option(..., "--file", "-f", help="Path to the pages CSV file."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Validate the file but do not write to the database."
    ),
) -> None:
    """Import pages and their categories from a CSV file.

    Existing pages with the same page_id are updated and their category
    lists replaced. See config/pages_example.csv for the format.
    """
    from edit_similar.db.repositories.category_repo import CategoryRepository
    from edit_similar.db.repositories.page_repo import PageRepository
    from edit_similar.db.schema import apply_schema
    from edit_similar.ingestion.page_csv import parse_page_csv

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(pages_file)
    typer.echo(f"Loading pages from: {path}")
    try:
        records = parse_page_csv(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] CSV parse failed:\n{exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Validated {len(records)} page(s).")

    if dry_run:
        typer.echo("[DRY RUN] No pages written to database.")
        for rec in records:
            typer.echo(f"  {rec.page.page_id} | {rec.page.title} | {', '.join(rec.categories)}")
        return

    links = 0
    with _connect(config, db_path) as conn:
        apply_schema(conn)
        pages = PageRepository(conn)
        categories = CategoryRepository(conn)
        for rec in records:
            pages.upsert(rec.page)
            links += categories.replace_categories(rec.page.page_id, rec.categories)

    typer.echo(f"  Upserted {len(records)} page(s), {links} category link(s).")
    typer.echo("[OK] Pages imported.")


@app.command("set-markers")
def set_markers(
    text: Optional[str] = typer.Argument(
        None, help="Marker text, e.g. '* Stubs * Articles needing cleanup'. Use '-' to disable."
    ),
    from_file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Read the marker text from a file instead."
    ),
    clear: bool = typer.Option(
        False, "--clear", help="Delete the stored text so the config fallback applies."
    ),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Store the marker category list in the database."""
    from edit_similar.db.repositories.message_repo import (
        MARKER_CATEGORIES_KEY,
        MessageRepository,
    )
    from edit_similar.db.schema import apply_schema
    from edit_similar.suggest.markers import parse_marker_text

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if clear:
        with _connect(config, db_path) as conn:
            apply_schema(conn)
            removed = MessageRepository(conn).delete(MARKER_CATEGORIES_KEY)
        typer.echo("[OK] Marker text cleared." if removed else "[OK] Nothing to clear.")
        return

    if from_file:
        try:
            text = Path(from_file).read_text(encoding="utf-8")
        except OSError as exc:
            typer.echo(f"[ERROR] Cannot read marker file: {exc}", err=True)
            raise typer.Exit(code=1)

    if text is None:
        typer.echo("[ERROR] Pass the marker text, --file, or --clear.", err=True)
        raise typer.Exit(code=1)

    with _connect(config, db_path) as conn:
        apply_schema(conn)
        MessageRepository(conn).set_text(MARKER_CATEGORIES_KEY, text)

    markers = parse_marker_text(text)
    if markers is None:
        typer.echo("[OK] Marker text stored; suggestions are disabled.")
    else:
        typer.echo(f"[OK] Marker text stored: {', '.join(markers)}")


@app.command("show-markers")
def show_markers(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print the marker categories currently in effect."""
    from edit_similar.db.repositories.category_repo import CategoryRepository
    from edit_similar.db.repositories.message_repo import MessageRepository
    from edit_similar.db.schema import apply_schema
    from edit_similar.suggest.hooks import marker_source
    from edit_similar.suggest.markers import MarkerRegistry

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _connect(config, db_path) as conn:
        apply_schema(conn)
        source = marker_source(MessageRepository(conn), config.edit_similar.marker_text)
        markers = MarkerRegistry(source).load()
        if markers is None:
            typer.echo("Suggestions are disabled (marker text blank, missing, or '-').")
            return
        store = CategoryRepository(conn)
        typer.echo(f"{len(markers)} marker categor{'y' if len(markers) == 1 else 'ies'}:")
        for name in markers:
            typer.echo(f"  {name} ({len(store.items_with_category(name))} pages)")


@app.command("recommend")
def recommend(
    page_id: int = typer.Option(..., "--page-id", help="ID of the page that was just saved."),
    user_id: int = typer.Option(0, "--user-id", help="Editing user's ID (0 = anonymous)."),
    user_name: str = typer.Option("127.0.0.1", "--user-name", help="Editing user's name."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    as_html: bool = typer.Option(False, "--html", help="Print the rendered message box."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Run the suggestion flow for one saved page, bypassing the throttle."""
    from edit_similar.db.repositories.page_repo import PageRepository
    from edit_similar.models.user import User
    from edit_similar.suggest.hooks import build_hooks
    from edit_similar.suggest.messages import render_html

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    settings = config.edit_similar
    user = User(user_id=user_id, name=user_name)

    with _connect(config, db_path) as conn:
        page = PageRepository(conn).get_by_id(page_id)
        if page is None:
            typer.echo(f"[ERROR] Page {page_id} not found.", err=True)
            raise typer.Exit(code=1)

        run = build_hooks(conn, settings).suggest(page, user)

    message = run.message
    if as_json:
        payload = {
            "page_id": page.page_id,
            "sampled_ids": list(run.result.ids) if run.result else [],
            "similar": run.result.similar if run.result else False,
            "titles": [p.display_title for p in run.pages],
            "message_key": message.key if message else None,
            "message": message.text if message else None,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    if message is None:
        typer.echo("No suggestions.")
        return

    typer.echo(render_html(message, user, settings.preferences_url) if as_html else message.text)


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
