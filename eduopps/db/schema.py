"""
Relational schema - SQLAlchemy Core table definitions.

Shared by every service module. Array-valued columns (age groups,
preference lists, visible_to_schools) use JSON so the same metadata
creates the schema on PostgreSQL and on SQLite.

Cascades:
- deleting a school removes its users, opportunities and news posts
- deleting an opportunity removes its documents, interests and form requests
- deleting a user removes their preferences, interests and form requests
"""

from datetime import datetime

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, MetaData, String,
    Table, Text, UniqueConstraint
)

metadata = MetaData()


def utcnow() -> datetime:
    return datetime.utcnow()


schools = Table(
    "schools", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("logo_url", Text),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

# Permission flag columns, in display order
PERMISSION_FLAGS = (
    "can_create_opportunities",
    "can_edit_own_opportunities",
    "can_edit_school_opportunities",
    "can_edit_all_opportunities",
    "can_view_opportunities",
    "can_manage_users",
    "can_manage_schools",
    "can_view_reports",
    "can_manage_settings",
    "can_manage_preferences",
    "can_upload_documents",
    "can_view_attendees",
    "can_manage_news",
)

user_roles = Table(
    "user_roles", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(50), nullable=False, unique=True),
    Column("description", Text),
    *[
        Column(flag, Boolean, nullable=False, default=(flag == "can_view_opportunities"))
        for flag in PERMISSION_FLAGS
    ],
    Column("requires_school", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

users = Table(
    "users", metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("username", String(100), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("first_name", Text, nullable=False),
    Column("last_name", Text, nullable=False),
    Column("role_id", Integer, ForeignKey("user_roles.id", ondelete="RESTRICT"), nullable=False),
    Column("school_id", Integer, ForeignKey("schools.id", ondelete="CASCADE")),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("profile_picture", Text),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

student_preferences = Table(
    "student_preferences", metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("industries", JSON, nullable=False, default=list),
    Column("age_groups", JSON, nullable=False, default=list),
    Column("opportunity_types", JSON, nullable=False, default=list),
    Column("locations", JSON, nullable=False, default=list),
    Column("created_at", DateTime, nullable=False, default=utcnow),
    Column("updated_at", DateTime, nullable=False, default=utcnow),
)

opportunities = Table(
    "opportunities", metadata,
    Column("id", Integer, primary_key=True),
    Column("title", Text, nullable=False),
    Column("organization", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("details", Text),
    Column("requirements", Text),
    Column("application_process", Text),
    Column("image_url", Text),
    Column("start_date", DateTime, nullable=False),
    Column("end_date", DateTime, nullable=False),
    Column("application_deadline", DateTime, nullable=False),
    Column("location", Text, nullable=False),
    Column("is_virtual", Boolean, nullable=False, default=False),
    Column("opportunity_type", Text, nullable=False),  # internship, volunteer, workshop, ...
    Column("compensation", Text),
    Column("industry", Text, nullable=False),
    Column("age_group", JSON, nullable=False, default=list),
    Column("ethnicity_focus", Text),
    Column("gender_focus", Text),
    Column("contact_person", Text),
    Column("contact_email", Text),
    Column("external_url", Text),
    Column("number_of_spaces", Integer),
    Column("created_by_id", Integer, ForeignKey("users.id", ondelete="SET NULL")),
    Column("school_id", Integer, ForeignKey("schools.id", ondelete="CASCADE")),
    Column("is_global", Boolean, nullable=False, default=False),
    Column("visible_to_schools", JSON, nullable=False, default=list),
    Column("created_at", DateTime, nullable=False, default=utcnow),
    Column("updated_at", DateTime, nullable=False, default=utcnow),
)

documents = Table(
    "documents", metadata,
    Column("id", Integer, primary_key=True),
    Column("opportunity_id", Integer, ForeignKey("opportunities.id", ondelete="CASCADE"), nullable=False),
    Column("name", Text, nullable=False),
    Column("file_path", Text, nullable=False),
    Column("file_type", Text, nullable=False),
    Column("file_size", Integer, nullable=False),
    Column("object_name", Text),  # key in the file store, None in metadata-only mode
    Column("uploaded_by_id", Integer, ForeignKey("users.id", ondelete="SET NULL")),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)

student_interests = Table(
    "student_interests", metadata,
    Column("id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("opportunity_id", Integer, ForeignKey("opportunities.id", ondelete="CASCADE"), nullable=False),
    Column("registration_date", DateTime, nullable=False, default=utcnow),
    Column("status", String(30), nullable=False, default="registered"),  # registered, attended, completed
    Column("notes", Text),
    UniqueConstraint("student_id", "opportunity_id", name="uq_student_interest"),
)

news_posts = Table(
    "news_posts", metadata,
    Column("id", Integer, primary_key=True),
    Column("title", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("author_id", Integer, ForeignKey("users.id", ondelete="SET NULL")),
    Column("school_id", Integer, ForeignKey("schools.id", ondelete="CASCADE")),
    Column("is_global", Boolean, nullable=False, default=False),
    Column("image_url", Text),
    Column("likes", Integer, nullable=False, default=0),
    Column("created_at", DateTime, nullable=False, default=utcnow),
    Column("updated_at", DateTime, nullable=False, default=utcnow),
)

form_requests = Table(
    "form_requests", metadata,
    Column("id", Integer, primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("opportunity_id", Integer, ForeignKey("opportunities.id", ondelete="CASCADE"), nullable=False),
    Column("request_date", DateTime, nullable=False, default=utcnow),
    Column("fulfilled", Boolean, nullable=False, default=False),
    Column("email_sent", Boolean, nullable=False, default=False),
    Column("email_sent_date", DateTime),
)

system_settings = Table(
    "system_settings", metadata,
    Column("id", Integer, primary_key=True),
    Column("key", String(100), nullable=False, unique=True),
    Column("value", Text, nullable=False),
    Column("description", Text),
    Column("updated_by_id", Integer, ForeignKey("users.id", ondelete="SET NULL")),
    Column("updated_at", DateTime, nullable=False, default=utcnow),
)

filter_options = Table(
    "filter_options", metadata,
    Column("id", Integer, primary_key=True),
    Column("category", String(50), nullable=False),  # industry, ageGroup, opportunityType, ethnicity, gender
    Column("value", Text, nullable=False),
    Column("label", Text, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_by_id", Integer, ForeignKey("users.id", ondelete="SET NULL")),
    Column("created_at", DateTime, nullable=False, default=utcnow),
)
