# migrations/versions/0001_initial.py
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "institutions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(64), nullable=False),
        sa.Column("institution_type", sa.String(40), nullable=False),
        sa.Column("board", sa.String(40), nullable=True),
        sa.Column("contact_email", sa.String(160), nullable=True),
        sa.Column("authority_name", sa.String(160), nullable=True),
        sa.Column("authority_title", sa.String(160), nullable=True),
        sa.Column("can_issue_certificates", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_institutions"),
    )
    op.create_index("ix_institutions_slug", "institutions", ["slug"], unique=True)

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("student_code", sa.String(40), nullable=False),
        sa.Column("first_name", sa.String(80), nullable=False),
        sa.Column("middle_name", sa.String(80), nullable=True),
        sa.Column("last_name", sa.String(80), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("email", sa.String(160), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_students"),
        sa.UniqueConstraint("email", name="uq_students_email"),
    )
    op.create_index("ix_students_student_code", "students", ["student_code"], unique=True)

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("institution_id", sa.Integer(), nullable=False),
        sa.Column("student_institution_id", sa.String(60), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_enrollments"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_enrollments_student_id_students"),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"], name="fk_enrollments_institution_id_institutions"),
        sa.UniqueConstraint("student_id", "institution_id", name="uq_enrollment_student_institution"),
    )

    op.create_table(
        "certificate_sequences",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("last_sequence", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_certificate_sequences"),
    )

    op.create_table(
        "certificates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("serial", sa.String(7), nullable=False),
        sa.Column("sequence_number", sa.BigInteger(), nullable=False),
        sa.Column("certificate_type", sa.String(40), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("institution_id", sa.Integer(), nullable=False),
        sa.Column("roll_number", sa.String(40), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("is_publicly_shareable", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("academic_details", sa.JSON(), nullable=False),
        sa.Column("qr_code_data", sa.String(255), nullable=True),
        sa.Column("authority_name", sa.String(160), nullable=True),
        sa.Column("authority_title", sa.String(160), nullable=True),
        sa.Column("artifact_state", sa.Enum("issued", "artifact_ready", name="artifact_state",
                                            native_enum=False, length=20), nullable=False),
        sa.Column("artifact_ref", sa.String(255), nullable=True),
        sa.Column("artifact_attempts", sa.Integer(), nullable=False),
        sa.Column("artifact_error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_certificates"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], name="fk_certificates_student_id_students"),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"], name="fk_certificates_institution_id_institutions"),
        sa.UniqueConstraint("sequence_number", name="uq_certificates_sequence_number"),
    )
    op.create_index("ix_certificates_serial", "certificates", ["serial"], unique=True)
    op.create_index("ix_certificates_student_id", "certificates", ["student_id"])
    op.create_index("ix_certificates_institution_id", "certificates", ["institution_id"])
    op.create_index("ix_certificates_serial_roll", "certificates", ["serial", "roll_number"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("institution_id", sa.Integer(), nullable=True),
        sa.Column("actor_type", sa.String(30), nullable=False),
        sa.Column("actor_name", sa.String(200), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("target_type", sa.String(50), nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_activity_logs"),
        sa.ForeignKeyConstraint(["institution_id"], ["institutions.id"], name="fk_activity_logs_institution_id_institutions"),
    )

    op.create_table(
        "idempotency_keys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(80), nullable=False),
        sa.Column("signature", sa.String(80), nullable=False),
        sa.Column("response_body", sa.LargeBinary(), nullable=False),
        sa.Column("response_mime", sa.String(80), nullable=False),
        sa.Column("status_code", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_idempotency_keys"),
    )
    op.create_index("ix_idempotency_keys_key", "idempotency_keys", ["key"])
    op.create_index("ix_idempotency_keys_signature", "idempotency_keys", ["signature"])

def downgrade():
    op.drop_table("idempotency_keys")
    op.drop_table("activity_logs")
    op.drop_table("certificates")
    op.drop_table("certificate_sequences")
    op.drop_table("enrollments")
    op.drop_table("students")
    op.drop_table("institutions")
