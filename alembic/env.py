import os
import sys
from logging.config import fileConfig

from alembic import context

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir)))

from core.config import settings
from core.database import engine
from models.base import Base
# Registers every table on Base.metadata
from models import user, session, otp, notification, verification  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

MIGRATION_OPTIONS = {
    "target_metadata": Base.metadata,
    "compare_type": True,
    "render_as_batch": settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"),
}


def run_offline():
    """Emit SQL for the configured database URL without connecting."""
    context.configure(url=settings.SQLALCHEMY_DATABASE_URI, literal_binds=True, **MIGRATION_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_online():
    with engine.connect() as connection:
        context.configure(connection=connection, **MIGRATION_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
