"""Alembic environment for the TutorHub schema.

The database URL comes from ``TUTORHUB_DATABASE__URL`` through the same
settings class the application uses; ``sqlalchemy.url`` in alembic.ini is
only the local default.
"""

from logging.config import fileConfig

from alembic import context
from pydantic import ValidationError
from sqlalchemy import create_engine, pool

from tutorhub.core.config import DatabaseSettings
from tutorhub.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    try:
        url = str(DatabaseSettings().url)
    except ValidationError:
        url = config.get_main_option("sqlalchemy.url", "")
    # Migrations run synchronously through psycopg 3
    scheme, _, rest = url.partition("://")
    if scheme in ("postgres", "postgresql"):
        url = f"postgresql+psycopg://{rest}"
    return url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL without a database connection."""
    _configure(url=get_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(get_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
