"""Command-line interface for DealHub.

This module provides the CLI commands for running and managing
the DealHub application.
"""

import asyncio
from typing import NoReturn

import click

from dealhub import __version__
from dealhub.core.config import get_settings
from dealhub.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="DealHub")
def cli() -> None:
    """DealHub - multi-tenant discount marketplace.

    Settings are read from DEALHUB_* environment variables or a .env file.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the DealHub server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use --workers 1 or switch to PostgreSQL.",
            err=True,
        )
        raise SystemExit(1)

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting DealHub server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "dealhub.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates all database tables. Use this only in development. In
    production, use migrations instead.
    """
    from dealhub.infrastructure.persistence import models  # noqa: F401
    from dealhub.infrastructure.persistence.database import (
        ensure_sqlite_directory,
        get_db_manager,
    )

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize():
        ensure_sqlite_directory(settings)
        db = get_db_manager()
        try:
            await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
@click.option("--email", type=str, default=None, help="Email address")
@click.option("--mobile", type=str, default=None, help="Mobile number")
@click.option("--name", "display_name", type=str, default=None, help="Display name")
@click.option(
    "--password",
    type=str,
    default=None,
    help="Password (prompted if omitted)",
)
def create_user(
    email: str | None, mobile: str | None, display_name: str | None, password: str | None
) -> None:
    """Create a user that can log in with its email or mobile number."""
    from dealhub.domain.services import default_password_validator
    from dealhub.infrastructure.auth import hash_password
    from dealhub.infrastructure.persistence.database import get_db_manager
    from dealhub.infrastructure.persistence.models import UserModel
    from dealhub.infrastructure.persistence.repositories import UserRepository

    configure_logging(get_settings())

    if not email and not mobile:
        click.echo("Error: --email or --mobile is required", err=True)
        raise SystemExit(1)

    if password is None:
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)

    errors = default_password_validator.validate(password)
    if errors:
        for error in errors:
            click.echo(f"Error: {error.message}", err=True)
        raise SystemExit(1)

    async def create() -> int:
        db = get_db_manager()
        try:
            async with db.session() as session:
                repo = UserRepository(session)
                for identifier in filter(None, (email, mobile)):
                    if await repo.get_by_identifier(identifier) is not None:
                        click.echo(f"Error: {identifier} is already registered", err=True)
                        raise SystemExit(1)
                user = await repo.create(
                    UserModel(
                        email=email,
                        mobile=mobile,
                        display_name=display_name,
                        password_hash=hash_password(password),
                    )
                )
                await session.commit()
                return user.id
        finally:
            await db.disconnect()

    user_id = asyncio.run(create())
    click.echo(f"User created with id {user_id}.")


@cli.command()
@click.argument("company_id", type=int)
@click.argument("user_id", type=int)
@click.argument("role", type=click.Choice(["Owner", "Manager", "Staff"]))
def grant_role(company_id: int, user_id: int, role: str) -> None:
    """Grant ROLE in company COMPANY_ID to user USER_ID."""
    from dealhub.domain.entities import TenantRole
    from dealhub.infrastructure.persistence.database import get_db_manager
    from dealhub.infrastructure.persistence.repositories import CompanyRepository

    configure_logging(get_settings())

    async def grant() -> None:
        db = get_db_manager()
        try:
            async with db.session() as session:
                companies = CompanyRepository(session)
                if await companies.get_by_id(company_id) is None:
                    click.echo(f"Error: company {company_id} not found", err=True)
                    raise SystemExit(1)
                await companies.set_member_role(company_id, user_id, TenantRole(role))
                await session.commit()
        finally:
            await db.disconnect()

    asyncio.run(grant())
    click.echo(f"Granted {role} in company {company_id} to user {user_id}.")


@cli.command()
def purge_tokens() -> None:
    """Delete expired access and refresh tokens."""
    from dealhub.infrastructure.auth import TenantAuthorizer
    from dealhub.infrastructure.persistence.database import get_db_manager

    settings = get_settings()
    configure_logging(settings)

    async def purge() -> int:
        db = get_db_manager()
        try:
            async with db.session() as session:
                return await TenantAuthorizer(session, settings=settings).purge_expired()
        finally:
            await db.disconnect()

    removed = asyncio.run(purge())
    click.echo(f"Removed {removed} expired tokens.")


@cli.command()
def info() -> None:
    """Display DealHub configuration."""
    settings = get_settings()

    click.echo(f"""
DealHub v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}

Security:
  Access TTL:   {settings.access_token_ttl_seconds} seconds
  Refresh TTL:  {settings.refresh_token_ttl_seconds} seconds
  Login Limit:  {settings.login_max_attempts} per {settings.login_attempt_window_seconds} seconds
  Rate Limit:   {"enabled" if settings.rate_limit_enabled else "disabled"}

Pagination:
  Default:      {settings.pagination_default_limit}
  Maximum:      {settings.pagination_max_limit}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the `dealhub` command and by `python -m dealhub`.
    """
    cli()


if __name__ == "__main__":
    main()
