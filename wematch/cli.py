"""
Custom Flask CLI commands.

These commands are registered with the app via ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check                          # Verify connectivity and tables
    flask seed-admin --email admin@x.org    # Create or promote a SUPER_ADMIN
"""

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from wematch.extensions import db
from wematch.models.enums import UserRole
from wematch.security import hash_password
from wematch.services import user_service

# Tables the application expects after ``flask db upgrade``.
EXPECTED_TABLES = ("users", "organizations", "skills", "opportunities", "audit_log")

_DEFAULT_EMAIL = "admin@localhost.dev"
_DEFAULT_FIRST_NAME = "Platform"
_DEFAULT_LAST_NAME = "Admin"


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the expected tables exist.

    Useful for confirming DATABASE_URL is correct and the migrations
    have been applied.
    """
    click.echo("=" * 60)
    click.echo("  WeMatch — Database Connectivity Check")
    click.echo("=" * 60)

    # Show the connection string with any password masked.
    db_uri = make_url(current_app.config["SQLALCHEMY_DATABASE_URI"])
    click.echo(f"\n  Connection string: {db_uri.render_as_string(hide_password=True)}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1")).fetchone()
    except SQLAlchemyError as exc:
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Troubleshooting tips:")
        click.echo("    - Is the database server running?")
        click.echo("    - Does DATABASE_URL match your server config?")
        raise SystemExit(1) from exc
    if not row or row[0] != 1:
        click.secho("      ✗ Unexpected result from test query.", fg="red")
        raise SystemExit(1)
    click.secho("      ✓ Connected successfully.", fg="green")

    # -- Step 2: Tables ----------------------------------------------------
    click.echo("[2/2] Checking tables...\n")
    present = set(inspect(db.engine).get_table_names())
    missing = [name for name in EXPECTED_TABLES if name not in present]
    for name in EXPECTED_TABLES:
        mark = "✓" if name in present else "✗"
        click.echo(f"      {mark} {name}")

    if missing:
        click.secho(
            f"\n      Missing tables: {', '.join(missing)}. Run: flask db upgrade",
            fg="red",
        )
        raise SystemExit(1)

    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("seed-admin")
@click.option("--email", default=_DEFAULT_EMAIL, show_default=True)
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password for the admin account.",
)
@click.option("--first", "first_name", default=_DEFAULT_FIRST_NAME, show_default=True)
@click.option("--last", "last_name", default=_DEFAULT_LAST_NAME, show_default=True)
@with_appcontext
def seed_admin_command(email: str, password: str, first_name: str, last_name: str):
    """
    Create a SUPER_ADMIN account.

    If the email already exists, the user is promoted to SUPER_ADMIN,
    reactivated and given the new password instead of being duplicated.
    """
    if len(password) < 8:
        raise click.BadParameter("must be at least 8 characters.", param_hint="--password")

    user = user_service.get_user_by_email(email)
    if user is None:
        user = user_service.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=UserRole.SUPER_ADMIN,
        )
        click.secho(f"✓ Created SUPER_ADMIN {user.email} (id={user.id}).", fg="green")
        return

    user.role = UserRole.SUPER_ADMIN
    user.is_active = True
    user.password_hash = hash_password(password)
    db.session.commit()
    click.secho(f"✓ Promoted existing user {user.email} (id={user.id}).", fg="green")


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(seed_admin_command)
