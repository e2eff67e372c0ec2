# migrations/env.py

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

config = context.config

# Keep the app's own loggers alive when migrations run from create_app().
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# Models only; importing app here would recurse into run_auto_migrations.
from models import db
target_metadata = db.metadata


def _db_url():
    """
    -x dburl=... > DATABASE_URL > sqlalchemy.url in alembic.ini > local sqlite.
    """
    x_args = context.get_x_argument(as_dictionary=True)
    url = (
        x_args.get("dburl")
        or os.getenv("DATABASE_URL")
        or config.get_main_option("sqlalchemy.url")
        or "sqlite:///careerquest.db"
    )
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def _skip_empty_autogenerate(context_, revision, directives):
    # `alembic revision --autogenerate` with no model changes writes nothing.
    if getattr(config.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []


def _configure_kwargs(url):
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=url.startswith("sqlite"),
        process_revision_directives=_skip_empty_autogenerate,
    )


def run_migrations_offline():
    url = _db_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    url = _db_url()
    config.set_main_option("sqlalchemy.url", url)

    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
