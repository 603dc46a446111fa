"""CLI for the ``beancount_staging`` package.

Typer-based console interface over the reconciliation engine. A ``.env`` in
the working directory is loaded with ``python-dotenv`` before anything else
(without overriding variables already set), which is where
``BEANCOUNT_STAGING_LOG_LEVEL`` is usually kept. Source files come from
``--journal-file``/``--staging-file`` or from a ``beancount-staging.toml``;
flags override the corresponding config section.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from beancount.core import data
from dotenv import load_dotenv

from .config import find_config, load_config
from .errors import StagingError
from .logging_setup import configure_logging
from .models import OnlyInJournal, OnlyInStaging
from .reconcile import ReconcileConfig
from .sources import StagingSource

# Journal-only directives that are expected to have no staging counterpart.
_QUIET_JOURNAL_KINDS = (data.Open, data.Price, data.Commodity, data.Pad)


@dataclass(slots=True)
class _Sources:
    config_path: Path | None
    journal: list[Path]
    staging: list[Path]


def _resolve_config(sources: _Sources) -> ReconcileConfig:
    """Combine CLI flags and config file into a ``ReconcileConfig``."""

    config_path = sources.config_path or find_config()
    if sources.journal and sources.staging:
        return ReconcileConfig(sources.journal, sources.staging)
    if config_path is None:
        typer.echo(
            "Error: no journal/staging files given and no beancount-staging.toml found.",
            err=True,
        )
        raise typer.Exit(2)

    base_dir, cfg = load_config(config_path)
    resolved = cfg.to_reconcile_config(base_dir)
    journal = sources.journal or list(resolved.journal_paths)
    staging: StagingSource | list[Path] = sources.staging or resolved.staging
    return ReconcileConfig(journal, staging)


def _fail(e: BaseException) -> typer.Exit:
    typer.echo(f"Error: {e}", err=True)
    return typer.Exit(1)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Tools for reviewing and staging beancount transactions.",
)


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ./beancount-staging.toml)."),
    ] = None,
    journal_file: Annotated[
        list[Path] | None,
        typer.Option(
            "--journal-file",
            "-j",
            help="Journal file path (repeatable). Committed entries go to the first one.",
        ),
    ] = None,
    staging_file: Annotated[
        list[Path] | None,
        typer.Option("--staging-file", "-s", help="Staging file path (repeatable)."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(help="Log level (falls back to BEANCOUNT_STAGING_LOG_LEVEL)."),
    ] = None,
) -> None:
    """Load ``.env``, configure logging and remember the source options."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)
    ctx.obj = _Sources(
        config_path=config,
        journal=list(journal_file or []),
        staging=list(staging_file or []),
    )


@app.command("diff")
def diff_cmd(ctx: typer.Context) -> None:
    """Show differences between journal and staging files and exit."""

    try:
        results = _resolve_config(ctx.obj).reconcile()
    except (StagingError, OSError) as e:
        raise _fail(e) from e

    from .review import render_entry

    journal_header = typer.style("━━━ Only in Journal ━━━", fg=typer.colors.YELLOW)
    staging_header = typer.style("━━━ Only in Staging (needs review) ━━━", fg=typer.colors.GREEN)
    journal_count = 0
    staging_count = 0

    for item in results:
        match item:
            case OnlyInJournal(entry=entry):
                if isinstance(entry, _QUIET_JOURNAL_KINDS):
                    continue
                typer.echo(journal_header)
                typer.echo(render_entry(entry))
                journal_count += 1
            case OnlyInStaging(entry=entry):
                typer.echo(staging_header)
                typer.echo(render_entry(entry))
                staging_count += 1

    if not journal_count and not staging_count:
        typer.echo("✓ All transactions match!")
        return
    typer.echo(typer.style("━━━ Summary ━━━", bold=True))
    if journal_count:
        typer.echo(f"  {journal_count} transaction(s) only in journal")
    if staging_count:
        typer.echo(f"  {staging_count} transaction(s) only in staging (need review)")


@app.command("review")
def review_cmd(
    ctx: typer.Context,
    *,
    edit: bool = typer.Option(False, help="Also offer to edit payee and narration."),
    watch: bool = typer.Option(True, help="Reload when source files change meanwhile."),
) -> None:
    """Interactively review and commit staging transactions."""

    from .review import review_pending
    from .state import StagingState
    from .watcher import watch_state

    try:
        state = StagingState(_resolve_config(ctx.obj))
        state.reload()
    except (StagingError, OSError) as e:
        raise _fail(e) from e

    if not len(state):
        typer.echo("Nothing to review.")
        return

    watcher = watch_state(state) if watch else None
    try:
        summary = review_pending(state, edit_text=edit, echo=typer.echo)
    finally:
        if watcher is not None:
            watcher.stop()

    typer.echo(
        f"Committed {summary.committed}, skipped {summary.skipped}, failed {summary.failed}."
    )
    if summary.failed:
        raise typer.Exit(1)


@app.command("watch")
def watch_cmd(ctx: typer.Context) -> None:
    """Watch the source files and report the pending count after each change."""

    from .state import StagingState
    from .watcher import watch_state

    try:
        state = StagingState(_resolve_config(ctx.obj))
        count = state.reload()
    except (StagingError, OSError) as e:
        raise _fail(e) from e

    typer.echo(f"{count} pending staging entries. Watching for changes (Ctrl+C to stop).")
    watcher = watch_state(state, on_reload=lambda n: typer.echo(f"{n} pending staging entries."))
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m beancount_staging.cli`
    app()
