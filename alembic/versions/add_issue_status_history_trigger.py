"""add issue status history trigger

Appends a row to issue_status_history when an issue is created and whenever
its status changes. Postgres only; other dialects get no history rows.

Revision ID: add_issue_status_history_trigger
Revises: create_campus_issue_tables
Create Date: 2026-10-19 10:05:00.000000

"""
from typing import Sequence, Union
from alembic import op


# revision identifiers, used by Alembic.
revision: str = 'add_issue_status_history_trigger'
down_revision: Union[str, Sequence[str], None] = 'create_campus_issue_tables'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    if op.get_bind().dialect.name != 'postgresql':
        return
    op.execute("""
        CREATE OR REPLACE FUNCTION log_issue_status_change() RETURNS trigger AS $$
        BEGIN
            IF TG_OP = 'INSERT' THEN
                INSERT INTO issue_status_history (issue_id, old_status, new_status, changed_by, change_reason, created_at)
                VALUES (NEW.id, NULL, NEW.status, NEW.user_id, 'Issue reported', now());
            ELSIF NEW.status IS DISTINCT FROM OLD.status THEN
                INSERT INTO issue_status_history (issue_id, old_status, new_status, changed_by, change_reason, created_at)
                VALUES (NEW.id, OLD.status, NEW.status, NULL, NULL, now());
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_issue_status_history
        AFTER INSERT OR UPDATE OF status ON issues
        FOR EACH ROW EXECUTE FUNCTION log_issue_status_change();
    """)


def downgrade() -> None:
    """Downgrade schema."""
    if op.get_bind().dialect.name != 'postgresql':
        return
    op.execute("DROP TRIGGER IF EXISTS trg_issue_status_history ON issues")
    op.execute("DROP FUNCTION IF EXISTS log_issue_status_change()")
