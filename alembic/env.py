"""Alembic environment for the access control schema.

The database URL comes from application settings (DATABASE_URL), never from
alembic.ini, so migrations always target the database the API uses.
"""

import logging
from logging.config import fileConfig

from alembic import context

from app.core.config import get_settings
from app.core.database import build_engine
from app.models import Base

config = context.config
if config.config_file_name is not None and config.get_section("loggers"):
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

# Every table the core owns: users, roles, permissions, user_roles, role_permissions.
target_metadata = Base.metadata


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    url = get_settings().DATABASE_URL
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect with the application's engine settings (SQLite gets foreign keys on)."""
    url = get_settings().DATABASE_URL
    engine = build_engine(url)
    logger.info("Running migrations against %s", engine.url.render_as_string(hide_password=True))
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                # SQLite cannot ALTER constraints in place; batch mode rebuilds the table.
                render_as_batch=_is_sqlite(url),
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
