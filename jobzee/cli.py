"""
Maintenance CLI (installed as `jobzee-admin`).

    jobzee-admin fix-indexes     repair employers indexes (legacy email_1, null company emails)
    jobzee-admin init-indexes    create every collection index
    jobzee-admin create-admin    create or reset an admin account
    jobzee-admin seed-plans      upsert the default pricing plans
"""

from typing import Optional

import typer
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from jobzee.core.auth import hash_password
from jobzee.core.config import get_settings
from jobzee.core.logging import configure_logging
from jobzee.db.mongodb import fix_employer_indexes, get_collection, init_mongo_indexes, set_mongo_client
from jobzee.services.mongo_service import utcnow
from jobzee.services.pricing_service import seed_default_plans

app = typer.Typer(help="Jobzee database maintenance commands.")


@app.callback()
def setup(
    mongodb_uri: Optional[str] = typer.Option(None, envvar="MONGODB_URI", help="Override the configured MongoDB URI."),
    log_level: str = typer.Option("INFO", help="Log level."),
) -> None:
    configure_logging(log_level)
    if mongodb_uri and mongodb_uri != get_settings().mongodb_uri:
        set_mongo_client(MongoClient(mongodb_uri))


@app.command("fix-indexes")
def fix_indexes() -> None:
    """Drop the legacy email_1 index, remove employers without a company email and rebuild indexes."""
    try:
        report = fix_employer_indexes()
    except PyMongoError as e:
        typer.echo(f"Index repair failed: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Indexes before: {', '.join(report['indexes_before']) or '(none)'}")
    if report["dropped_legacy_index"]:
        typer.echo("Dropped legacy index email_1")
    typer.echo(f"Deleted employer documents without company_email: {report['deleted_documents']}")
    typer.echo(f"Indexes after: {', '.join(report['indexes_after'])}")
    typer.echo("Employer indexes fixed.")


@app.command("init-indexes")
def init_indexes() -> None:
    """Create all collection indexes."""
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        typer.echo(f"Index creation failed: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Indexes created.")


@app.command("create-admin")
def create_admin(
    email: str = typer.Option(..., help="Admin login email."),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    name: str = typer.Option("Administrator", help="Display name."),
) -> None:
    """Create an admin, or reset the password of an existing one."""
    if len(password) < 8:
        raise typer.BadParameter("Password must be at least 8 characters", param_hint="--password")

    now = utcnow()
    result = get_collection("admins").update_one(
        {"email": email.lower()},
        {
            "$set": {"name": name, "password_hash": hash_password(password), "is_active": True, "updated_at": now},
            "$setOnInsert": {"email": email.lower(), "role": "admin", "created_at": now},
        },
        upsert=True,
    )
    typer.echo(f"Admin {'created' if result.upserted_id else 'updated'}: {email.lower()}")


@app.command("seed-plans")
def seed_plans() -> None:
    """Insert or refresh the free, basic, premium and enterprise plans."""
    inserted = seed_default_plans()
    typer.echo(f"Pricing plans seeded ({inserted} new).")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
