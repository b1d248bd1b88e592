import logging
import os
from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context
from src.config import load_settings

# NOTE: Migrations run against plain sqlite3, SQLCipher keys are not applied here.

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# An explicit URL (tests, CLI) wins over DB_PATH from the environment
sqlalchemy_url = config.get_main_option("sqlalchemy.url")
if not sqlalchemy_url:
    db_path_absolute = os.path.abspath(load_settings().db_path)
    sqlalchemy_url = f"sqlite:///{db_path_absolute}"
    config.set_main_option("sqlalchemy.url", sqlalchemy_url)

# Interpret the config file for Python logging, unless the caller already has.
if config.config_file_name is not None and not logging.getLogger().handlers:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Schema is managed by hand-written migrations only
target_metadata = None


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Emits SQL for the configured URL without creating an Engine.
    """
    context.configure(
        url=sqlalchemy_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = create_engine(
        sqlalchemy_url,
        poolclass=pool.NullPool,
        connect_args={"check_same_thread": False},
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
