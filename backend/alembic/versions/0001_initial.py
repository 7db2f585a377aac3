from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default="1200"),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "uq_player_name_lower",
        "player",
        [sa.text("lower(name)")],
        unique=True,
    )
    op.create_table(
        "match",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("winner_ids", sa.JSON(), nullable=True),
        sa.Column("loser_ids", sa.JSON(), nullable=True),
        sa.Column("score", sa.String(), nullable=False, server_default=""),
        sa.Column("rating_change", sa.Integer(), nullable=True),
        sa.Column("team_a_ids", sa.JSON(), nullable=True),
        sa.Column("team_b_ids", sa.JSON(), nullable=True),
        sa.Column("winner_team", sa.String(), nullable=True),
    )

def downgrade():
    op.drop_table("match")
    op.drop_index("uq_player_name_lower", table_name="player")
    op.drop_table("player")
