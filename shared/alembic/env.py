"""Alembic environment for the mail delivery tables.

The DSN comes from ``shared.config.PostgresConfig`` unless one is passed
explicitly with ``alembic -x dsn=postgresql://...`` or set as
``sqlalchemy.url`` on the Alembic config.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

import shared.db.models  # noqa: F401  registers tables on Base.metadata
from shared.config import PostgresConfig
from shared.db.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _get_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("dsn")
    return override or config.get_main_option("sqlalchemy.url") or PostgresConfig().dsn


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without connecting."""
    context.configure(
        url=_get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _get_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
