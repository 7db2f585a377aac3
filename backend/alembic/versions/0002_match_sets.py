from alembic import op
import sqlalchemy as sa

revision = "0002_match_sets"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade():
    op.add_column("match", sa.Column("sets", sa.JSON(), nullable=True))


def downgrade():
    op.drop_column("match", "sets")
