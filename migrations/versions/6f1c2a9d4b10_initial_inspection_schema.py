"""initial_inspection_schema

Creates the inspection workflow tables:
  - projects               — property engagement (address + client)
  - inspections            — inspection session, section pointer and statuses
  - findings               — inspector observations per section
  - checklist_items        — SIMPLE mode PASS / FAIL / NA decisions
  - building_code_clauses  — clause reference data
  - clause_reviews         — CLAUSE_REVIEW mode assessments
  - documents              — supporting documents per project
  - audit_logs             — append-only workflow audit trail

Tables created conditionally (IF NOT EXISTS semantics) so the revision can run
against databases that already received these tables via db.create_all().

Revision ID: 6f1c2a9d4b10
Revises:
Create Date: 2026-10-18 09:12:40.118204
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = '6f1c2a9d4b10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing = set(inspector.get_table_names())

    # ── Projects ──────────────────────────────────────────────────────────
    if "projects" not in existing:
        op.create_table(
            "projects",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("address", sa.String(length=500), nullable=False),
            sa.Column("client_name", sa.String(length=200), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False,
                      comment="ACTIVE | COMPLETED | ARCHIVED"),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )

    # ── Inspections ───────────────────────────────────────────────────────
    if "inspections" not in existing:
        op.create_table(
            "inspections",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=True),
            sa.Column("checklist_id", sa.String(length=100), nullable=False),
            sa.Column("mode", sa.String(length=20), nullable=False,
                      comment="SIMPLE | CLAUSE_REVIEW"),
            sa.Column("address", sa.String(length=500), nullable=False),
            sa.Column("client_name", sa.String(length=200), nullable=False),
            sa.Column("inspector_name", sa.String(length=200), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False,
                      comment="STARTED | IN_PROGRESS | COMPLETED"),
            sa.Column("current_section", sa.String(length=100), nullable=True),
            sa.Column("section_states", sa.JSON(), nullable=False),
            sa.Column("version", sa.Integer(), nullable=False),
            *_timestamps(),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_inspection_project", "inspections", ["project_id"])
        op.create_index("idx_inspection_status", "inspections", ["status"])

    # ── Findings ──────────────────────────────────────────────────────────
    if "findings" not in existing:
        op.create_table(
            "findings",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("inspection_id", sa.String(length=36), nullable=False),
            sa.Column("section", sa.String(length=100), nullable=False),
            sa.Column("text", sa.Text(), nullable=False),
            sa.Column("severity", sa.String(length=10), nullable=False),
            sa.Column("matched_comment", sa.Text(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(["inspection_id"], ["inspections.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_finding_inspection_section", "findings", ["inspection_id", "section"])

    # ── Checklist items ───────────────────────────────────────────────────
    if "checklist_items" not in existing:
        op.create_table(
            "checklist_items",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("inspection_id", sa.String(length=36), nullable=False),
            sa.Column("category", sa.String(length=20), nullable=False),
            sa.Column("item", sa.String(length=500), nullable=False),
            sa.Column("decision", sa.String(length=10), nullable=False, comment="PASS | FAIL | NA"),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("photo_ids", sa.JSON(), nullable=False),
            sa.Column("sort_order", sa.Integer(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(["inspection_id"], ["inspections.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_checklist_item_inspection_category", "checklist_items",
                        ["inspection_id", "category"])

    # ── Building code clauses ─────────────────────────────────────────────
    if "building_code_clauses" not in existing:
        op.create_table(
            "building_code_clauses",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("code", sa.String(length=20), nullable=False),
            sa.Column("title", sa.String(length=200), nullable=False),
            sa.Column("category", sa.String(length=2), nullable=False),
            sa.Column("performance_text", sa.Text(), nullable=False),
            sa.Column("sort_order", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("code"),
        )
        op.create_index("ix_building_code_clauses_category", "building_code_clauses", ["category"])

    # ── Clause reviews ────────────────────────────────────────────────────
    if "clause_reviews" not in existing:
        op.create_table(
            "clause_reviews",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("inspection_id", sa.String(length=36), nullable=False),
            sa.Column("clause_id", sa.String(length=36), nullable=False),
            sa.Column("applicability", sa.String(length=12), nullable=False,
                      comment="APPLICABLE | NA"),
            sa.Column("na_reason", sa.Text(), nullable=True),
            sa.Column("observations", sa.Text(), nullable=True),
            sa.Column("photo_ids", sa.JSON(), nullable=False),
            sa.Column("doc_ids", sa.JSON(), nullable=False),
            sa.Column("docs_required", sa.Text(), nullable=True),
            sa.Column("remedial_works", sa.Text(), nullable=True),
            sa.Column("sort_order", sa.Integer(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(["inspection_id"], ["inspections.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["clause_id"], ["building_code_clauses.id"], ondelete="RESTRICT"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("inspection_id", "clause_id",
                                name="uq_clause_review_inspection_clause"),
        )
        op.create_index("ix_clause_reviews_inspection_id", "clause_reviews", ["inspection_id"])

    # ── Documents ─────────────────────────────────────────────────────────
    if "documents" not in existing:
        op.create_table(
            "documents",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=False),
            sa.Column("document_type", sa.String(length=20), nullable=False),
            sa.Column("description", sa.String(length=500), nullable=False),
            sa.Column("filename", sa.String(length=255), nullable=True),
            sa.Column("file_path", sa.String(length=500), nullable=True),
            sa.Column("issuer", sa.String(length=200), nullable=True),
            sa.Column("reference_number", sa.String(length=100), nullable=True),
            sa.Column("status", sa.String(length=12), nullable=False,
                      comment="REQUIRED | RECEIVED | OUTSTANDING | NA"),
            sa.Column("verified", sa.Boolean(), nullable=False),
            sa.Column("linked_clauses", sa.JSON(), nullable=False),
            sa.Column("sort_order", sa.Integer(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_document_project", "documents", ["project_id"])
        op.create_index("idx_document_status", "documents", ["status"])

    # ── Audit log ─────────────────────────────────────────────────────────
    if "audit_logs" not in existing:
        op.create_table(
            "audit_logs",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("project_id", sa.String(length=36), nullable=True),
            sa.Column("entity_type", sa.String(length=30), nullable=False),
            sa.Column("entity_id", sa.String(length=36), nullable=False),
            sa.Column("action", sa.String(length=60), nullable=False),
            sa.Column("actor", sa.String(length=150), nullable=False),
            sa.Column("diff_json", sa.Text(), nullable=True),
            sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("idx_audit_entity", "audit_logs", ["entity_type", "entity_id"])
        op.create_index("idx_audit_project", "audit_logs", ["project_id"])
        op.create_index("idx_audit_action", "audit_logs", ["action"])
        op.create_index("idx_audit_ts", "audit_logs", ["timestamp"])


def downgrade():
    op.drop_table("audit_logs")
    op.drop_table("documents")
    op.drop_table("clause_reviews")
    op.drop_table("building_code_clauses")
    op.drop_table("checklist_items")
    op.drop_table("findings")
    op.drop_table("inspections")
    op.drop_table("projects")
