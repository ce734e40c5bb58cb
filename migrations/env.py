"""Alembic environment configuration, driven by Flask-Migrate."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from logging.config import fileConfig

from alembic import context
from flask import current_app, has_app_context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")


def _app_context_scope():
    """Los comandos `flask db` ya traen contexto; alembic directo lo crea."""
    if has_app_context():
        return nullcontext()
    from app import create_app
    return create_app().app_context()


def _get_engine():
    return current_app.extensions["migrate"].db.engine


def _get_url() -> str:
    return _get_engine().url.render_as_string(hide_password=False).replace("%", "%%")


def _target_metadata():
    import models  # noqa: F401  registra las tablas en la metadata
    return current_app.extensions["migrate"].db.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=_get_url(),
        target_metadata=_target_metadata(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    def process_revision_directives(context, revision, directives):
        if getattr(config.cmd_opts, "autogenerate", False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info("No changes in schema detected.")

    connectable = _get_engine()

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=_target_metadata(),
            process_revision_directives=process_revision_directives,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


with _app_context_scope():
    if context.is_offline_mode():
        run_migrations_offline()
    else:
        run_migrations_online()
