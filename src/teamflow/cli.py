"""CLI entry point for teamflow."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import click

from .application.views import TaskView, TeamView
from .core.errors import ConfigError, TeamflowError


@click.group()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--database-url", default=None, help="Database URL override")
@click.pass_context
def main(ctx: click.Context, config: str | None, database_url: str | None) -> None:
    """Team and task management."""
    overrides: dict[str, Any] = {}
    if database_url:
        overrides["database_url"] = database_url
    ctx.obj = {"config": config, "overrides": overrides}


@contextmanager
def _app(ctx: click.Context) -> Iterator[Any]:
    """Build the app for one command; domain errors exit with status 1."""
    from .main import bootstrap
    from .observability.logger import new_correlation_id

    new_correlation_id()
    app = None
    try:
        app = bootstrap(config_path=ctx.obj["config"], overrides=ctx.obj["overrides"])
        yield app
    except TeamflowError as exc:
        click.echo(f"error [{exc.kind.value}]: {exc.message}", err=True)
        ctx.exit(1)
    finally:
        if app is not None:
            app.close()


def _print_team(team: TeamView) -> None:
    click.echo(f"{team.name} ({team.id}) - {team.size} member(s)")
    for member in team.members:
        click.echo(f"  {member.id}  {member.name} <{member.email}> [{member.status}]")


def _print_task(task: TaskView) -> None:
    click.echo(f"{task.id}  {task.title} [{task.progress_status}] owner={task.owner_id}")


def _emit(as_json: bool, views: list, printer: Callable[[Any], None]) -> None:
    if as_json:
        click.echo(json.dumps([v.model_dump() for v in views], indent=2))
        return
    for view in views:
        printer(view)


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

@main.command("create-team")
@click.argument("name")
@click.pass_context
def create_team(ctx: click.Context, name: str) -> None:
    """Create an empty team."""
    with _app(ctx) as app:
        _print_team(app.create_team.execute(name))


@main.command("add-member")
@click.argument("team")
@click.argument("name")
@click.argument("email")
@click.pass_context
def add_member(ctx: click.Context, team: str, name: str, email: str) -> None:
    """Enrol a new active member into TEAM."""
    with _app(ctx) as app:
        _print_team(app.add_team_member.execute(team, name, email))


@main.command("remove-member")
@click.argument("team")
@click.argument("member_id")
@click.pass_context
def remove_member(ctx: click.Context, team: str, member_id: str) -> None:
    """Remove MEMBER_ID from TEAM."""
    with _app(ctx) as app:
        _print_team(app.remove_team_member.execute(team, member_id))


@main.command("set-status")
@click.argument("member_id")
@click.argument("status", type=click.Choice(["active", "inactive", "withdrawn"]))
@click.pass_context
def set_status(ctx: click.Context, member_id: str, status: str) -> None:
    """Change a member's enrollment status."""
    with _app(ctx) as app:
        _print_team(app.change_member_status.execute(member_id, status))


@main.command("show-team")
@click.argument("name")
@click.pass_context
def show_team(ctx: click.Context, name: str) -> None:
    """Show one team and its roster."""
    with _app(ctx) as app:
        _print_team(app.get_team.by_name(name))


@main.command("list-teams")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def list_teams(ctx: click.Context, as_json: bool) -> None:
    """List all teams in creation order."""
    with _app(ctx) as app:
        _emit(as_json, app.list_teams.execute(), _print_team)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

@main.command("create-task")
@click.argument("title")
@click.argument("owner_id")
@click.pass_context
def create_task(ctx: click.Context, title: str, owner_id: str) -> None:
    """Create a task owned by OWNER_ID."""
    with _app(ctx) as app:
        _print_task(app.create_task.execute(title, owner_id))


@main.command("edit-task")
@click.argument("task_id")
@click.argument("title")
@click.option("--as", "requester_id", required=True, help="Requesting member id")
@click.pass_context
def edit_task(ctx: click.Context, task_id: str, title: str, requester_id: str) -> None:
    """Change a task's title (owner only)."""
    with _app(ctx) as app:
        _print_task(app.edit_task_title.execute(task_id, title, requester_id))


@main.command("set-progress")
@click.argument("task_id")
@click.argument(
    "status",
    type=click.Choice(["not_started", "in_progress", "waiting_for_review", "completed"]),
)
@click.option("--as", "requester_id", required=True, help="Requesting member id")
@click.pass_context
def set_progress(ctx: click.Context, task_id: str, status: str, requester_id: str) -> None:
    """Advance a task's progress status (owner only)."""
    with _app(ctx) as app:
        _print_task(app.update_task_progress.execute(task_id, status, requester_id))


@main.command("list-tasks")
@click.argument("owner_id")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def list_tasks(ctx: click.Context, owner_id: str, as_json: bool) -> None:
    """List the tasks owned by OWNER_ID."""
    with _app(ctx) as app:
        _emit(as_json, app.list_tasks_by_owner.execute(owner_id), _print_task)


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------

@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema."""
    with _app(ctx) as app:
        if not app.settings.database_url:
            raise ConfigError("init-db needs a database_url")
        click.echo("Database tables created / verified.")


if __name__ == "__main__":
    main()
