"""Task board CLI tool (taskboardctl)."""

import os

import typer

app = typer.Typer(name="taskboardctl", help="Task Board CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")

API_URL = os.environ.get("TASKBOARD_API_URL", "http://localhost:8000")


@db_app.command("create")
def db_create():
    """Create all tables if they don't exist."""
    from taskboard.core.config import settings
    from taskboard.db.session import init_db

    init_db()
    typer.echo(f"Tables created on {settings.DATABASE_URL}")


@db_app.command("seed")
def db_seed():
    """Seed demo users, a board and tasks."""
    from taskboard.db.session import SessionLocal, init_db
    from taskboard.db.seeds.seed_sample_data import SAMPLE_PASSWORD, seed_sample_data

    init_db()
    db = SessionLocal()
    try:
        ids = seed_sample_data(db)
    finally:
        db.close()
    typer.echo(f"Seeded users {', '.join(sorted(ids))} (password: {SAMPLE_PASSWORD})")


@db_app.command("reset")
def db_reset():
    """Drop and recreate all tables (DANGER)."""
    confirm = typer.confirm("This will DROP every table. Continue?")
    if not confirm:
        raise typer.Abort()
    import taskboard.models  # noqa: F401
    from taskboard.db.base import Base
    from taskboard.db.session import engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    typer.echo("Database reset")


@app.command("boards")
def list_boards(
    token: str = typer.Option(..., envvar="TASKBOARD_TOKEN", help="Bearer token from /api/auth/login"),
):
    """List the boards you can access."""
    import httpx
    resp = httpx.get(
        f"{API_URL}/api/boards/",
        headers={"Authorization": f"Bearer {token}"},
    )
    if resp.status_code != 200:
        typer.echo(resp.json().get("detail", resp.text), err=True)
        raise typer.Exit(code=1)
    for b in resp.json():
        typer.echo(f"  [{b['id']}] {b['name']} ({len(b['members'])} members)")


@app.command("tasks")
def list_tasks(
    board_id: str = typer.Argument(..., help="Board ID"),
    token: str = typer.Option(..., envvar="TASKBOARD_TOKEN", help="Bearer token from /api/auth/login"),
):
    """List a board's tasks grouped by column."""
    import httpx
    resp = httpx.get(
        f"{API_URL}/api/tasks/",
        params={"board_id": board_id},
        headers={"Authorization": f"Bearer {token}"},
    )
    if resp.status_code != 200:
        typer.echo(resp.json().get("detail", resp.text), err=True)
        raise typer.Exit(code=1)
    status = None
    for t in resp.json():
        if t["status"] != status:
            status = t["status"]
            typer.echo(f"{status}:")
        typer.echo(f"  {t['position']}. {t['title']} [{t['priority']}]")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(True, help="Auto-reload"),
):
    """Start the FastAPI development server."""
    import uvicorn
    uvicorn.run("taskboard.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
