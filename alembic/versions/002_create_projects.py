"""002: create projects table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE projects (
            id              VARCHAR(64)  PRIMARY KEY,
            name            VARCHAR(200) NOT NULL,
            project_type    VARCHAR(30)  NOT NULL,
            country         VARCHAR(100) NOT NULL,
            vintage_year    SMALLINT     NOT NULL,
            requested_tons  INTEGER      NOT NULL,
            methodology     VARCHAR(200) NOT NULL,
            owner_id        VARCHAR(64)  NOT NULL,
            status          VARCHAR(20)  NOT NULL DEFAULT 'UNDER_VALIDATION',
            description     TEXT,
            website         VARCHAR(500),
            mrv_score       SMALLINT,
            reviewed_at     TIMESTAMPTZ,
            created_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_projects_status CHECK (
                status IN ('UNDER_VALIDATION', 'VERIFIED', 'REJECTED')
            ),
            CONSTRAINT ck_projects_type CHECK (
                project_type IN ('REFORESTATION', 'RENEWABLE_ENERGY', 'METHANE_CAPTURE',
                                 'DIRECT_AIR_CAPTURE', 'GEOTHERMAL', 'HYDROELECTRIC')
            ),
            CONSTRAINT ck_projects_requested_gt_0 CHECK (requested_tons > 0),
            CONSTRAINT ck_projects_mrv_range CHECK (
                mrv_score IS NULL OR mrv_score BETWEEN 88 AND 96
            )
        );
    """)
    op.execute("CREATE INDEX idx_projects_status ON projects (status, created_at);")
    op.execute("CREATE INDEX idx_projects_owner ON projects (owner_id);")
    op.execute("""
        CREATE TRIGGER trg_projects_updated_at
            BEFORE UPDATE ON projects
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS projects CASCADE;")
