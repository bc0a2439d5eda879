from typing import Optional

import typer

from spotjott.db import get_session, init_db, wait_for_database
from spotjott.services import seeder
from spotjott.services.counters import audit_counters, fix_counters
from spotjott.services.emotions import seed_default_emotions

app = typer.Typer(help="SpotJott operations CLI")


@app.command("init-db")
def init_db_cmd():
    """Wait for the database to answer, then create any missing tables."""
    try:
        wait_for_database()
        init_db()
    except Exception as e:
        typer.echo(f"❌ Could not initialize database: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("✓ Database schema is up to date")


@app.command("seed-emotions")
def seed_emotions_cmd():
    """Insert the default emotion catalog (safe to run repeatedly)."""
    with get_session() as db:
        added = seed_default_emotions(db)
    typer.echo(f"✓ Emotion catalog seeded ({added} added)")


@app.command("seed")
def seed_cmd(
    users: int = typer.Option(20, help="Number of users"),
    jots: int = typer.Option(100, help="Number of jots"),
    follows: int = typer.Option(60, help="Number of follow edges"),
    seed: Optional[int] = typer.Option(None, help="Random seed (default: fixed seed for reproducible data)"),
):
    """Populate the database with demo data."""
    # Set deterministic seeds for reproducible data
    seeder.seed_random_generators(seed if seed is not None else seeder.SEED)

    with get_session() as db:
        us = seeder.make_users(db, users)
        made = seeder.make_follows(db, us, follows)
        js = seeder.make_jots(db, us, jots)
        seeder.make_engagement(db, js, us)
        seeder.make_diaries(db, us)
        seeder.make_emotion_history(db, us)
    typer.echo(f"Seed complete: users={users}, jots={jots}, follows={made}")
    typer.echo(f"Demo password for every user: {seeder.DEMO_PASSWORD}")


@app.command("check-counters")
def check_counters_cmd(
    fix: bool = typer.Option(False, "--fix", help="Rewrite drifted counters from their detail rows"),
):
    """Compare every denormalized counter with the rows it summarizes."""
    try:
        with get_session() as db:
            mismatches = fix_counters(db) if fix else audit_counters(db)
    except Exception as e:
        typer.echo(f"❌ Error checking counters: {e}", err=True)
        raise typer.Exit(1)

    if not mismatches:
        typer.echo("✓ All counters match their detail rows")
        return

    typer.echo(f"\n⚠️  {len(mismatches)} counter mismatch(es):")
    typer.echo("─" * 60)
    typer.echo(f"{'Counter':<26} {'Row':<8} {'Stored':<8} {'Actual':<8}")
    typer.echo("─" * 60)
    for m in mismatches:
        typer.echo(f"{m['counter']:<26} {m['id']:<8} {m['stored']:<8} {m['actual']:<8}")

    if fix:
        typer.echo("\n✓ Counters rewritten")
    else:
        typer.echo("\nRun with --fix to rewrite them")
        raise typer.Exit(1)


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the API server."""
    import uvicorn

    from spotjott.main import configure_logging, install_fatal_handlers

    configure_logging()
    install_fatal_handlers()
    uvicorn.run("spotjott.main:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    app()
