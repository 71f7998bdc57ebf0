import logging
from logging.config import fileConfig

# The app is imported directly so migrations see the same DATABASE_URL as the server
from app import app
from models import db

from alembic import context
from sqlalchemy import engine_from_config, pool

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)
logger = logging.getLogger('alembic.env')

database_url = str(app.config.get('SQLALCHEMY_DATABASE_URI'))
config.set_main_option('sqlalchemy.url', database_url.replace('%', '%%'))

# songs and ratings
target_metadata = db.metadata

# SQLite cannot ALTER constraints in place, so the ratings checks need batch mode
render_as_batch = database_url.startswith('sqlite')


def process_revision_directives(context, revision, directives):
    # Skip writing an empty revision when autogenerate finds no changes
    if getattr(config.cmd_opts, 'autogenerate', False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            logger.info('No changes in schema detected.')


def run_migrations_offline() -> None:
    """Emit SQL for the songs/ratings schema without a live connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=render_as_batch,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_main_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=render_as_batch,
            compare_type=True,
            process_revision_directives=process_revision_directives,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
