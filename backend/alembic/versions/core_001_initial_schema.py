"""Initial schema: users, bookings, leads, account, search, alerts, activity

Revision ID: core_001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "core_001"
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _user_fk(nullable=False, ondelete="CASCADE"):
    return sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete=ondelete), nullable=nullable)


def _ts(name):
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now())


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        _id(),
        sa.Column("open_id", sa.String(400), nullable=False, unique=True),
        sa.Column("name", sa.String(255)),
        sa.Column("email", sa.String(320), unique=True),
        sa.Column("phone", sa.String(32)),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("login_method", sa.String(64)),
        sa.Column("role", sa.String(20), server_default="user"),
        sa.Column("avatar_url", sa.String(500)),
        sa.Column("square_customer_id", sa.String(255)),
        sa.Column("preferred_language", sa.String(5), server_default="en"),
        sa.Column("preferred_currency", sa.String(3), server_default="USD"),
        sa.Column("loyalty_points", sa.Integer, server_default="0"),
        sa.Column("loyalty_tier", sa.String(20), server_default="bronze"),
        sa.Column("email_notifications", sa.Boolean, server_default="true"),
        sa.Column("price_alert_notifications", sa.Boolean, server_default="true"),
        sa.Column("marketing_emails", sa.Boolean, server_default="false"),
        sa.Column("is_active", sa.Boolean, server_default="true"),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("last_signed_in"),
    )

    op.create_table(
        "login_attempts",
        _id(),
        _user_fk(nullable=True, ondelete="SET NULL"),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("success", sa.Boolean, server_default="false"),
        sa.Column("ip_address", sa.String(64)),
        sa.Column("user_agent", sa.String(500)),
        _ts("attempted_at"),
    )
    op.create_index("idx_login_attempts_email", "login_attempts", ["email", "attempted_at"])

    # --- bookings ---
    op.create_table(
        "bookings",
        _id(),
        sa.Column("booking_reference", sa.String(12), nullable=False, unique=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("square_order_id", sa.String(255)),
        sa.Column("square_payment_id", sa.String(255)),
        sa.Column("square_refund_id", sa.String(255)),
        sa.Column("status", sa.String(20), server_default="pending"),
        sa.Column("origin", sa.String(3), nullable=False),
        sa.Column("origin_name", sa.String(255)),
        sa.Column("destination", sa.String(3), nullable=False),
        sa.Column("destination_name", sa.String(255)),
        sa.Column("departure_date", sa.Date, nullable=False),
        sa.Column("return_date", sa.Date),
        sa.Column("adults", sa.Integer, server_default="1"),
        sa.Column("children", sa.Integer, server_default="0"),
        sa.Column("infants", sa.Integer, server_default="0"),
        sa.Column("travel_class", sa.String(20), server_default="ECONOMY"),
        sa.Column("flight_offer", JSONB, nullable=False),
        sa.Column("total_amount", sa.Integer, nullable=False),
        sa.Column("currency", sa.String(3), server_default="USD"),
        sa.Column("points_earned", sa.Integer, server_default="0"),
        sa.Column("contact_email", sa.String(320), nullable=False),
        sa.Column("contact_phone", sa.String(32)),
        sa.Column("special_requests", sa.Text),
        _ts("created_at"),
        _ts("updated_at"),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
    )
    op.create_index("idx_bookings_user", "bookings", ["user_id"])
    op.create_index("idx_bookings_square_order", "bookings", ["square_order_id"])

    op.create_table(
        "passengers",
        _id(),
        sa.Column("booking_id", UUID(as_uuid=True), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer, server_default="0"),
        sa.Column("passenger_type", sa.String(10), server_default="adult"),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date),
        sa.Column("passport_number", sa.String(50)),
        sa.Column("nationality", sa.String(2)),
    )
    op.create_index("idx_passengers_booking", "passengers", ["booking_id"])

    op.create_table(
        "leads",
        _id(),
        sa.Column("type", sa.String(20), server_default="contact"),
        sa.Column("status", sa.String(20), server_default="new"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(50)),
        sa.Column("origin", sa.String(10)),
        sa.Column("origin_name", sa.String(255)),
        sa.Column("destination", sa.String(10)),
        sa.Column("destination_name", sa.String(255)),
        sa.Column("departure_date", sa.String(20)),
        sa.Column("return_date", sa.String(20)),
        sa.Column("adults", sa.Integer, server_default="1"),
        sa.Column("children", sa.Integer, server_default="0"),
        sa.Column("infants", sa.Integer, server_default="0"),
        sa.Column("travel_class", sa.String(20)),
        sa.Column("flight_details", JSONB),
        sa.Column("estimated_price", sa.String(50)),
        sa.Column("message", sa.Text),
        sa.Column("preferred_language", sa.String(5), server_default="en"),
        _ts("created_at"),
        _ts("updated_at"),
    )

    # --- account ---
    op.create_table(
        "traveler_profiles",
        _id(),
        _user_fk(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("middle_name", sa.String(100)),
        sa.Column("date_of_birth", sa.Date),
        sa.Column("gender", sa.String(10)),
        sa.Column("nationality", sa.String(2)),
        sa.Column("email", sa.String(320)),
        sa.Column("phone", sa.String(32)),
        sa.Column("document_type", sa.String(20)),
        sa.Column("document_number", sa.String(50)),
        sa.Column("document_country", sa.String(2)),
        sa.Column("document_expiry", sa.Date),
        sa.Column("seat_preference", sa.String(20), server_default="no_preference"),
        sa.Column("meal_preference", sa.String(20), server_default="regular"),
        sa.Column("special_assistance", sa.Text),
        sa.Column("relationship", sa.String(20), server_default="self"),
        sa.Column("is_primary", sa.Boolean, server_default="false"),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("idx_traveler_profiles_user", "traveler_profiles", ["user_id"])

    op.create_table(
        "frequent_flyer_programs",
        _id(),
        _user_fk(),
        sa.Column(
            "traveler_profile_id", UUID(as_uuid=True),
            sa.ForeignKey("traveler_profiles.id", ondelete="SET NULL"),
        ),
        sa.Column("airline_code", sa.String(3), nullable=False),
        sa.Column("airline_name", sa.String(100), nullable=False),
        sa.Column("member_number", sa.String(50), nullable=False),
        sa.Column("tier_status", sa.String(50)),
        _ts("created_at"),
    )
    op.create_index("idx_frequent_flyer_user", "frequent_flyer_programs", ["user_id"])

    op.create_table(
        "user_preferences",
        _id(),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("preferred_airlines", JSONB, server_default="[]"),
        sa.Column("avoided_airlines", JSONB, server_default="[]"),
        sa.Column("preferred_cabin_class", sa.String(20), server_default="ECONOMY"),
        sa.Column("max_stops", sa.Integer, server_default="2"),
        sa.Column("preferred_departure_time", sa.String(20), server_default="any"),
        sa.Column("home_airports", JSONB, server_default="[]"),
        sa.Column("preferred_alliances", JSONB, server_default="[]"),
        sa.Column("budget_range", sa.String(20), server_default="moderate"),
        sa.Column("price_drop_threshold", sa.Integer, server_default="10"),
        _ts("updated_at"),
    )

    # --- search ---
    op.create_table(
        "flight_searches",
        _id(),
        _user_fk(nullable=True, ondelete="SET NULL"),
        sa.Column("origin", sa.String(10), nullable=False),
        sa.Column("destination", sa.String(10), nullable=False),
        sa.Column("departure_date", sa.String(20), nullable=False),
        sa.Column("return_date", sa.String(20)),
        sa.Column("adults", sa.Integer, server_default="1"),
        sa.Column("children", sa.Integer, server_default="0"),
        sa.Column("infants", sa.Integer, server_default="0"),
        sa.Column("travel_class", sa.String(20)),
        sa.Column("results_count", sa.Integer, server_default="0"),
        sa.Column("cheapest_price", sa.String(20)),
        sa.Column("from_cache", sa.Boolean, server_default="false"),
        _ts("searched_at"),
    )
    op.create_index("idx_flight_searches_route", "flight_searches", ["origin", "destination"])

    op.create_table(
        "user_search_history",
        _id(),
        _user_fk(),
        sa.Column("origin", sa.String(3), nullable=False),
        sa.Column("origin_name", sa.String(255)),
        sa.Column("destination", sa.String(3), nullable=False),
        sa.Column("destination_name", sa.String(255)),
        sa.Column("departure_date", sa.String(10), nullable=False),
        sa.Column("return_date", sa.String(10)),
        sa.Column("adults", sa.Integer, server_default="1"),
        sa.Column("children", sa.Integer, server_default="0"),
        sa.Column("infants", sa.Integer, server_default="0"),
        sa.Column("cabin_class", sa.String(20)),
        sa.Column("results_count", sa.Integer),
        sa.Column("lowest_price_found", sa.Integer),
        _ts("searched_at"),
    )
    op.create_index("idx_search_history_user", "user_search_history", ["user_id", "searched_at"])

    op.create_table(
        "saved_routes",
        _id(),
        _user_fk(),
        sa.Column("origin", sa.String(3), nullable=False),
        sa.Column("origin_name", sa.String(255)),
        sa.Column("destination", sa.String(3), nullable=False),
        sa.Column("destination_name", sa.String(255)),
        sa.Column("preferred_cabin_class", sa.String(20)),
        sa.Column("typical_travelers", JSONB),
        sa.Column("search_count", sa.Integer, server_default="1"),
        _ts("last_searched"),
        sa.Column("nickname", sa.String(100)),
        _ts("created_at"),
    )
    op.create_index("idx_saved_routes_user", "saved_routes", ["user_id"])

    op.create_table(
        "popular_destinations",
        _id(),
        sa.Column("iata_code", sa.String(3), nullable=False, unique=True),
        sa.Column("city_name", sa.String(255), nullable=False),
        sa.Column("country_name", sa.String(255), nullable=False),
        sa.Column("country_code", sa.String(2), nullable=False),
        sa.Column("image_url", sa.String(500)),
        sa.Column("description", sa.String(500)),
        sa.Column("search_count", sa.Integer, server_default="0"),
        sa.Column("booking_count", sa.Integer, server_default="0"),
        sa.Column("average_price", sa.Integer),
        sa.Column("is_featured", sa.Boolean, server_default="false"),
        sa.Column("display_order", sa.Integer, server_default="0"),
    )

    # --- alerts ---
    op.create_table(
        "price_alerts",
        _id(),
        _user_fk(),
        sa.Column("origin", sa.String(3), nullable=False),
        sa.Column("origin_name", sa.String(255)),
        sa.Column("destination", sa.String(3), nullable=False),
        sa.Column("destination_name", sa.String(255)),
        sa.Column("departure_date_start", sa.String(10)),
        sa.Column("departure_date_end", sa.String(10)),
        sa.Column("return_date_start", sa.String(10)),
        sa.Column("return_date_end", sa.String(10)),
        sa.Column("is_flexible_dates", sa.Boolean, server_default="false"),
        sa.Column("adults", sa.Integer, server_default="1"),
        sa.Column("children", sa.Integer, server_default="0"),
        sa.Column("infants", sa.Integer, server_default="0"),
        sa.Column("cabin_class", sa.String(20), server_default="ECONOMY"),
        sa.Column("target_price", sa.Integer, nullable=False),
        sa.Column("current_lowest_price", sa.Integer),
        sa.Column("currency", sa.String(3), server_default="USD"),
        sa.Column("is_active", sa.Boolean, server_default="true"),
        sa.Column("last_checked", sa.DateTime(timezone=True)),
        sa.Column("last_notified", sa.DateTime(timezone=True)),
        sa.Column("notification_count", sa.Integer, server_default="0"),
        _ts("created_at"),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
    )
    op.create_index("idx_price_alerts_user", "price_alerts", ["user_id"])
    op.create_index("idx_price_alerts_active", "price_alerts", ["is_active", "expires_at"])

    op.create_table(
        "notifications",
        _id(),
        _user_fk(),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("related_alert_id", UUID(as_uuid=True)),
        sa.Column("related_booking_id", UUID(as_uuid=True)),
        sa.Column("previous_price", sa.Integer),
        sa.Column("new_price", sa.Integer),
        sa.Column("is_read", sa.Boolean, server_default="false"),
        sa.Column("action_url", sa.String(500)),
        _ts("created_at"),
        sa.Column("read_at", sa.DateTime(timezone=True)),
    )
    op.create_index("idx_notifications_user", "notifications", ["user_id", "is_read"])

    # --- activity ---
    op.create_table(
        "navigation_history",
        _id(),
        _user_fk(nullable=True, ondelete="SET NULL"),
        sa.Column("guest_id", sa.String(64)),
        sa.Column("method", sa.String(10), nullable=False),
        sa.Column("path", sa.String(500), nullable=False),
        sa.Column("query", JSONB),
        sa.Column("user_agent", sa.String(500)),
        sa.Column("ip", sa.String(64)),
        _ts("created_at"),
    )
    op.create_index("idx_navigation_user", "navigation_history", ["user_id"])
    op.create_index("idx_navigation_guest", "navigation_history", ["guest_id"])

    op.create_table(
        "chat_conversations",
        _id(),
        _user_fk(nullable=True, ondelete="SET NULL"),
        sa.Column("session_id", sa.String(64), nullable=False, unique=True),
        sa.Column("messages", JSONB, server_default="[]"),
        sa.Column("language", sa.String(5), server_default="en"),
        sa.Column("user_age", sa.Integer),
        sa.Column("summary", sa.Text),
        _ts("created_at"),
        _ts("updated_at"),
    )


def downgrade() -> None:
    for table in (
        "chat_conversations",
        "navigation_history",
        "notifications",
        "price_alerts",
        "popular_destinations",
        "saved_routes",
        "user_search_history",
        "flight_searches",
        "user_preferences",
        "frequent_flyer_programs",
        "traveler_profiles",
        "leads",
        "passengers",
        "bookings",
        "login_attempts",
        "users",
    ):
        op.drop_table(table)
