import importlib
import logging
import pkgutil
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from flask import current_app

config = context.config


def _init_logging():
    ini = config.config_file_name
    if ini and Path(ini).exists():
        fileConfig(ini)
        return
    # No alembic.ini shipped: plain stderr logging is enough for upgrades
    logging.basicConfig(level=logging.INFO)


_init_logging()
logger = logging.getLogger("alembic.env")


def get_engine():
    return current_app.extensions["migrate"].db.engine


def get_engine_url():
    return get_engine().url.render_as_string(hide_password=False).replace("%", "%%")


config.set_main_option("sqlalchemy.url", get_engine_url())
target_db = current_app.extensions["migrate"].db


def get_metadata():
    if hasattr(target_db, "metadatas"):
        return target_db.metadatas[None]
    return target_db.metadata


def _autoload_models():
    """Import every roadboard.models module so autogenerate sees all tables."""
    import roadboard.models as models_pkg

    for m in pkgutil.iter_modules(models_pkg.__path__):
        importlib.import_module(f"roadboard.models.{m.name}")


def _render_as_batch() -> bool:
    # SQLite cannot ALTER most things in place
    return get_engine().dialect.name == "sqlite"


def run_migrations_offline():
    _autoload_models()
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=get_metadata(),
        literal_binds=True,
        compare_type=True,
        render_as_batch=_render_as_batch(),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    def process_revision_directives(context_, revision, directives):
        if getattr(config.cmd_opts, "autogenerate", False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info("No changes in schema detected.")

    conf_args = current_app.extensions["migrate"].configure_args
    conf_args = {
        **conf_args,
        "process_revision_directives": conf_args.get(
            "process_revision_directives", process_revision_directives
        ),
        "compare_type": True,
        "render_as_batch": _render_as_batch(),
        "target_metadata": get_metadata(),
    }

    _autoload_models()

    with get_engine().connect() as connection:
        context.configure(connection=connection, **conf_args)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
