"""Initial commercial core schema."""

from __future__ import annotations

from alembic import op

import models  # noqa: F401
from extensions import db

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create all tables defined in SQLAlchemy metadata, including the
    partial unique index that allows one sent quote per opportunity."""

    bind = op.get_bind()
    db.metadata.create_all(bind=bind, checkfirst=True)


def downgrade() -> None:
    """Drop all tables created by this migration."""

    bind = op.get_bind()
    db.metadata.drop_all(bind=bind, checkfirst=True)
