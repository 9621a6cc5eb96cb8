from logging.config import fileConfig
import os
import sys

from alembic import context
from sqlalchemy import create_engine, pool
from sqlmodel import SQLModel

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from feecalc.models import *  # noqa: F401,F403,E402

target_metadata = SQLModel.metadata


def database_url() -> str:
    # alembic.ini leaves sqlalchemy.url empty; tests set it explicitly
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    from feecalc.db import DATABASE_URL

    return DATABASE_URL


def run_migrations_offline():
    url = database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_engine(database_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # sqlite cannot ALTER most columns in place
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
