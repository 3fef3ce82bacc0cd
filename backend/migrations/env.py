"""Alembic environment for the member portal schema.

The database URL comes from the portal settings (``DATABASE_URL``), never
from alembic.ini.
"""

from sqlalchemy import engine_from_config, pool

from alembic import context

from memberportal.config import get_settings
from memberportal.models import Base
from memberportal.observability.logging_config import configure_logging

config = context.config

settings = get_settings()
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
