"""initial blottr schema

Revision ID: 0001_initial_blottr_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_blottr_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum columns are stored by value (non-native, VARCHAR(32))
ENUM = sa.String(length=32)


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def _has_table(name: str) -> bool:
    return name in sa.inspect(op.get_bind()).get_table_names()


def upgrade() -> None:
    if not _has_table("cities"):
        op.create_table(
            "cities",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("slug", sa.String(length=120), nullable=False),
            sa.Column("postal_code", sa.String(length=10), nullable=True),
            sa.Column("insee_code", sa.String(length=10), nullable=True, unique=True),
            sa.Column("latitude", sa.Float(), nullable=True),
            sa.Column("longitude", sa.Float(), nullable=True),
            sa.Column("population", sa.Integer(), nullable=True),
            sa.Column("area_km2", sa.Float(), nullable=True),
            sa.Column("department_code", sa.String(length=3), nullable=True),
            sa.Column("department_name", sa.String(length=100), nullable=True),
            sa.Column("region_code", sa.String(length=3), nullable=True),
            sa.Column("region_name", sa.String(length=100), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("meta_title", sa.String(length=255), nullable=True),
            sa.Column("meta_description", sa.Text(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("is_featured", sa.Boolean(), nullable=False),
            sa.Column("priority", sa.Integer(), nullable=False),
            *_timestamps(),
        )
        op.create_index("ix_cities_id", "cities", ["id"])
        op.create_index("ix_cities_slug", "cities", ["slug"], unique=True)
        op.create_index("ix_cities_postal_code", "cities", ["postal_code"])

    if not _has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("full_name", sa.String(length=255), nullable=True),
            sa.Column("email", sa.String(length=254), nullable=False),
            sa.Column("password", sa.String(), nullable=False),
            sa.Column("role", ENUM, nullable=False),
            sa.Column("phone", sa.String(length=20), nullable=True),
            sa.Column("bio", sa.Text(), nullable=True),
            sa.Column("avatar_url", sa.String(length=500), nullable=True),
            sa.Column("birth_date", sa.Date(), nullable=True),
            sa.Column("gender", sa.String(length=32), nullable=True),
            sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id", ondelete="SET NULL"), nullable=True),
            sa.Column("address", sa.String(length=255), nullable=True),
            sa.Column("postal_code", sa.String(length=10), nullable=True),
            sa.Column("latitude", sa.Float(), nullable=True),
            sa.Column("longitude", sa.Float(), nullable=True),
            sa.Column("email_verified", sa.Boolean(), nullable=False),
            sa.Column("email_verified_at", sa.DateTime(), nullable=True),
            sa.Column("phone_verified", sa.Boolean(), nullable=False),
            sa.Column("phone_verified_at", sa.DateTime(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("last_login_at", sa.DateTime(), nullable=True),
            sa.Column("refresh_token_hash", sa.String(), nullable=True),
            sa.Column("refresh_token_expires_at", sa.DateTime(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_users_id", "users", ["id"])
        op.create_index("ix_users_email", "users", ["email"], unique=True)
        op.create_index("ix_users_city_id", "users", ["city_id"])

    if not _has_table("salons"):
        op.create_table(
            "salons",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("slug", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("short_description", sa.String(length=500), nullable=True),
            sa.Column("email", sa.String(length=254), nullable=True),
            sa.Column("phone", sa.String(length=20), nullable=True),
            sa.Column("website", sa.String(length=500), nullable=True),
            sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id", ondelete="SET NULL"), nullable=True),
            sa.Column("address", sa.String(length=255), nullable=True),
            sa.Column("postal_code", sa.String(length=10), nullable=True),
            sa.Column("latitude", sa.Float(), nullable=True),
            sa.Column("longitude", sa.Float(), nullable=True),
            sa.Column("opening_hours", sa.JSON(), nullable=True),
            sa.Column("services", sa.JSON(), nullable=True),
            sa.Column("price_range_min", sa.Numeric(10, 2), nullable=True),
            sa.Column("price_range_max", sa.Numeric(10, 2), nullable=True),
            sa.Column("currency", sa.String(length=3), nullable=False),
            sa.Column("instagram_handle", sa.String(length=100), nullable=True),
            sa.Column("facebook_url", sa.String(length=500), nullable=True),
            sa.Column("tiktok_handle", sa.String(length=100), nullable=True),
            sa.Column("gallery_images", sa.JSON(), nullable=True),
            sa.Column("verification_status", ENUM, nullable=False),
            sa.Column("verified_at", sa.DateTime(), nullable=True),
            sa.Column("verified_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("verification_notes", sa.Text(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("is_featured", sa.Boolean(), nullable=False),
            sa.Column("accepts_walk_ins", sa.Boolean(), nullable=False),
            sa.Column("appointment_required", sa.Boolean(), nullable=False),
            sa.Column("priority", sa.Integer(), nullable=False),
            sa.Column("meta_title", sa.String(length=255), nullable=True),
            sa.Column("meta_description", sa.Text(), nullable=True),
            sa.Column("average_rating", sa.Float(), nullable=False),
            sa.Column("total_reviews", sa.Integer(), nullable=False),
            sa.Column("total_artists", sa.Integer(), nullable=False),
            sa.Column("last_activity_at", sa.DateTime(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_salons_id", "salons", ["id"])
        op.create_index("ix_salons_slug", "salons", ["slug"], unique=True)
        op.create_index("ix_salons_city_id", "salons", ["city_id"])
        op.create_index("ix_salons_verification_status", "salons", ["verification_status"])

    if not _has_table("artists"):
        op.create_table(
            "artists",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
            sa.Column("stage_name", sa.String(length=100), nullable=False),
            sa.Column("slug", sa.String(length=120), nullable=False),
            sa.Column("bio", sa.Text(), nullable=True),
            sa.Column("short_bio", sa.String(length=500), nullable=True),
            sa.Column("specialty", sa.String(length=100), nullable=True),
            sa.Column("years_experience", sa.Integer(), nullable=True),
            sa.Column("started_tattooing_at", sa.Date(), nullable=True),
            sa.Column("experience_level", ENUM, nullable=False),
            sa.Column("art_styles", sa.JSON(), nullable=True),
            sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id", ondelete="SET NULL"), nullable=True),
            sa.Column(
                "primary_salon_id", sa.Integer(), sa.ForeignKey("salons.id", ondelete="SET NULL"), nullable=True
            ),
            sa.Column("accepts_bookings", sa.Boolean(), nullable=False),
            sa.Column("appointment_only", sa.Boolean(), nullable=False),
            sa.Column("min_price", sa.Numeric(8, 2), nullable=True),
            sa.Column("max_price", sa.Numeric(8, 2), nullable=True),
            sa.Column("currency", sa.String(length=3), nullable=False),
            sa.Column("availability", sa.JSON(), nullable=True),
            sa.Column("portfolio_images", sa.JSON(), nullable=True),
            sa.Column("instagram_handle", sa.String(length=100), nullable=True),
            sa.Column("instagram_url", sa.String(length=500), nullable=True),
            sa.Column("website", sa.String(length=500), nullable=True),
            sa.Column("social_links", sa.JSON(), nullable=True),
            sa.Column("verification_status", ENUM, nullable=False),
            sa.Column("verified_at", sa.DateTime(), nullable=True),
            sa.Column("verified_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("verification_notes", sa.Text(), nullable=True),
            sa.Column("has_health_certificate", sa.Boolean(), nullable=False),
            sa.Column("has_professional_insurance", sa.Boolean(), nullable=False),
            sa.Column("health_certificate_expires_at", sa.Date(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("is_featured", sa.Boolean(), nullable=False),
            sa.Column("is_accepting_new_clients", sa.Boolean(), nullable=False),
            sa.Column("priority", sa.Integer(), nullable=False),
            sa.Column("average_rating", sa.Float(), nullable=False),
            sa.Column("total_reviews", sa.Integer(), nullable=False),
            sa.Column("total_tattoos", sa.Integer(), nullable=False),
            sa.Column("profile_views", sa.Integer(), nullable=False),
            sa.Column("last_activity_at", sa.DateTime(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_artists_id", "artists", ["id"])
        op.create_index("ix_artists_user_id", "artists", ["user_id"], unique=True)
        op.create_index("ix_artists_slug", "artists", ["slug"], unique=True)
        op.create_index("ix_artists_city_id", "artists", ["city_id"])
        op.create_index("ix_artists_verification_status", "artists", ["verification_status"])
        op.create_index("ix_artists_is_active", "artists", ["is_active"])

    if not _has_table("artist_salons"):
        op.create_table(
            "artist_salons",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("artist_id", sa.Integer(), sa.ForeignKey("artists.id", ondelete="CASCADE"), nullable=False),
            sa.Column("salon_id", sa.Integer(), sa.ForeignKey("salons.id", ondelete="CASCADE"), nullable=False),
            sa.Column("relationship_type", ENUM, nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("schedule", sa.JSON(), nullable=True),
            sa.Column("hourly_rate", sa.Numeric(8, 2), nullable=True),
            sa.Column("commission_rate", sa.Numeric(5, 2), nullable=True),
            sa.Column("started_working_at", sa.Date(), nullable=True),
            sa.Column("ended_working_at", sa.Date(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("can_book_appointments", sa.Boolean(), nullable=False),
            sa.Column("can_manage_schedule", sa.Boolean(), nullable=False),
            sa.Column("has_salon_key", sa.Boolean(), nullable=False),
            *_timestamps(),
            sa.UniqueConstraint("artist_id", "salon_id", name="uq_artist_salon"),
        )
        op.create_index("ix_artist_salons_id", "artist_salons", ["id"])
        op.create_index("ix_artist_salons_artist_id", "artist_salons", ["artist_id"])
        op.create_index("ix_artist_salons_salon_id", "artist_salons", ["salon_id"])

    if not _has_table("tattoos"):
        op.create_table(
            "tattoos",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("artist_id", sa.Integer(), sa.ForeignKey("artists.id", ondelete="CASCADE"), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("slug", sa.String(length=255), nullable=False),
            sa.Column("original_filename", sa.String(length=255), nullable=True),
            sa.Column("storage_path", sa.String(length=500), nullable=True),
            sa.Column("image_variants", sa.JSON(), nullable=True),
            sa.Column("primary_color", sa.String(length=7), nullable=True),
            sa.Column("file_size", sa.Integer(), nullable=True),
            sa.Column("dimensions", sa.JSON(), nullable=True),
            sa.Column("content_type", sa.String(length=50), nullable=True),
            sa.Column("content_hash", sa.String(length=64), nullable=True),
            sa.Column("style", ENUM, nullable=True),
            sa.Column("body_placement", ENUM, nullable=True),
            sa.Column("size_category", ENUM, nullable=True),
            sa.Column("color_type", ENUM, nullable=True),
            sa.Column("session_count", sa.Integer(), nullable=True),
            sa.Column("estimated_hours", sa.Numeric(5, 2), nullable=True),
            sa.Column("status", ENUM, nullable=False),
            sa.Column("is_featured", sa.Boolean(), nullable=False),
            sa.Column("is_portfolio_highlight", sa.Boolean(), nullable=False),
            sa.Column("display_order", sa.Integer(), nullable=False),
            sa.Column("view_count", sa.Integer(), nullable=False),
            sa.Column("like_count", sa.Integer(), nullable=False),
            sa.Column("share_count", sa.Integer(), nullable=False),
            sa.Column("engagement_score", sa.Numeric(5, 2), nullable=False),
            sa.Column("allows_inquiries", sa.Boolean(), nullable=False),
            sa.Column("shows_pricing", sa.Boolean(), nullable=False),
            sa.Column("price_estimate", sa.Numeric(8, 2), nullable=True),
            sa.Column("price_currency", sa.String(length=3), nullable=False),
            sa.Column("alt_text", sa.String(length=500), nullable=True),
            sa.Column("search_keywords", sa.JSON(), nullable=True),
            sa.Column("meta_title", sa.String(length=255), nullable=True),
            sa.Column("meta_description", sa.Text(), nullable=True),
            sa.Column("published_at", sa.DateTime(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_tattoos_id", "tattoos", ["id"])
        op.create_index("ix_tattoos_artist_id", "tattoos", ["artist_id"])
        op.create_index("ix_tattoos_slug", "tattoos", ["slug"], unique=True)
        op.create_index("ix_tattoos_content_hash", "tattoos", ["content_hash"])
        op.create_index("ix_tattoos_style", "tattoos", ["style"])
        op.create_index("ix_tattoos_body_placement", "tattoos", ["body_placement"])
        op.create_index("ix_tattoos_status", "tattoos", ["status"])
        op.create_index("ix_tattoos_engagement_score", "tattoos", ["engagement_score"])
        op.create_index("ix_tattoos_published_at", "tattoos", ["published_at"])

    if not _has_table("tags"):
        op.create_table(
            "tags",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=100), nullable=False),
            sa.Column("slug", sa.String(length=120), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("category", ENUM, nullable=False),
            sa.Column("parent_tag_id", sa.Integer(), sa.ForeignKey("tags.id", ondelete="SET NULL"), nullable=True),
            sa.Column("level", sa.Integer(), nullable=False),
            sa.Column("color_code", sa.String(length=7), nullable=True),
            sa.Column("icon_name", sa.String(length=50), nullable=True),
            sa.Column("display_order", sa.Integer(), nullable=False),
            sa.Column("usage_count", sa.Integer(), nullable=False),
            sa.Column("is_featured", sa.Boolean(), nullable=False),
            sa.Column("is_trending", sa.Boolean(), nullable=False),
            sa.Column("popularity_score", sa.Float(), nullable=False),
            sa.Column("requires_approval", sa.Boolean(), nullable=False),
            sa.Column("is_approved", sa.Boolean(), nullable=False),
            sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("approved_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("translations", sa.JSON(), nullable=True),
            *_timestamps(),
        )
        op.create_index("ix_tags_id", "tags", ["id"])
        op.create_index("ix_tags_slug", "tags", ["slug"], unique=True)
        op.create_index("ix_tags_category", "tags", ["category"])

    if not _has_table("tattoo_tags"):
        op.create_table(
            "tattoo_tags",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("tag_id", sa.Integer(), sa.ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
            sa.Column("tattoo_id", sa.Integer(), sa.ForeignKey("tattoos.id", ondelete="CASCADE"), nullable=False),
            sa.Column("relevance_score", sa.Float(), nullable=False),
            sa.Column("is_primary", sa.Boolean(), nullable=False),
            sa.Column("assignment_type", ENUM, nullable=False),
            sa.Column("is_approved", sa.Boolean(), nullable=False),
            *_timestamps(),
            sa.UniqueConstraint("tag_id", "tattoo_id", name="uq_tattoo_tag"),
        )
        op.create_index("ix_tattoo_tags_id", "tattoo_tags", ["id"])
        op.create_index("ix_tattoo_tags_tag_id", "tattoo_tags", ["tag_id"])
        op.create_index("ix_tattoo_tags_tattoo_id", "tattoo_tags", ["tattoo_id"])

    if not _has_table("contact_inquiries"):
        op.create_table(
            "contact_inquiries",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("full_name", sa.String(length=100), nullable=False),
            sa.Column("email", sa.String(length=254), nullable=False),
            sa.Column("phone", sa.String(length=20), nullable=True),
            sa.Column("subject", sa.String(length=200), nullable=False),
            sa.Column("message", sa.Text(), nullable=False),
            sa.Column("project_type", ENUM, nullable=False),
            sa.Column("budget", sa.String(length=50), nullable=True),
            sa.Column("preferred_date", sa.String(length=100), nullable=True),
            sa.Column("location", sa.String(length=200), nullable=True),
            sa.Column("tattoo_styles", sa.JSON(), nullable=True),
            sa.Column("size", sa.String(length=20), nullable=True),
            sa.Column("placement", sa.String(length=100), nullable=True),
            sa.Column("has_existing_tattoos", sa.Boolean(), nullable=False),
            sa.Column("reference_images", sa.JSON(), nullable=True),
            sa.Column("artist_id", sa.Integer(), sa.ForeignKey("artists.id", ondelete="SET NULL"), nullable=True),
            sa.Column("tattoo_id", sa.Integer(), sa.ForeignKey("tattoos.id", ondelete="SET NULL"), nullable=True),
            sa.Column("status", ENUM, nullable=False),
            sa.Column("source", ENUM, nullable=False),
            sa.Column("priority", sa.Integer(), nullable=False),
            sa.Column("is_read", sa.Boolean(), nullable=False),
            sa.Column("is_starred", sa.Boolean(), nullable=False),
            sa.Column("ip_address", sa.String(length=45), nullable=True),
            sa.Column("user_agent", sa.Text(), nullable=True),
            sa.Column("metadata", sa.JSON(), nullable=True),
            sa.Column("first_replied_at", sa.DateTime(), nullable=True),
            sa.Column("last_replied_at", sa.DateTime(), nullable=True),
            sa.Column("replies_count", sa.Integer(), nullable=False),
            *_timestamps(),
        )
        op.create_index("ix_contact_inquiries_email", "contact_inquiries", ["email"])
        op.create_index("ix_contact_inquiries_artist_id", "contact_inquiries", ["artist_id"])
        op.create_index("ix_contact_inquiries_status", "contact_inquiries", ["status"])
        op.create_index("ix_contact_inquiries_priority", "contact_inquiries", ["priority"])
        op.create_index("ix_contact_inquiries_is_read", "contact_inquiries", ["is_read"])


def downgrade() -> None:
    for table in (
        "contact_inquiries",
        "tattoo_tags",
        "tags",
        "tattoos",
        "artist_salons",
        "artists",
        "salons",
        "users",
        "cities",
    ):
        if _has_table(table):
            op.drop_table(table)
