"""Initial schema: listings, bookings and saved items with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "accommodations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("property_type", sa.String(50), nullable=False, server_default="apartment"),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("max_guests", sa.Integer(), nullable=False),
        sa.Column("price_per_night", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("amenities", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("max_guests > 0", name="check_accommodation_max_guests_positive"),
        sa.CheckConstraint("price_per_night >= 0", name="check_accommodation_price_non_negative"),
    )
    op.create_index("ix_accommodations_city", "accommodations", ["city"])

    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=False, server_default="general"),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("available_spots", sa.Integer(), nullable=False),
        sa.Column("ticket_types", sa.JSON(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        # The conditional decrement relies on these never being violated
        sa.CheckConstraint("available_spots >= 0", name="check_event_available_spots_non_negative"),
        sa.CheckConstraint("capacity > 0", name="check_event_capacity_positive"),
        sa.CheckConstraint("available_spots <= capacity", name="check_event_available_lte_capacity"),
    )
    op.create_index("ix_events_city", "events", ["city"])
    op.create_index("ix_events_start_date", "events", ["start_date"])

    op.create_table(
        "transport_options",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("provider", sa.String(255), nullable=False),
        sa.Column("transport_type", sa.String(50), nullable=False),
        sa.Column("route_name", sa.String(255), nullable=False),
        sa.Column("origin", sa.String(100), nullable=False),
        sa.Column("destination", sa.String(100), nullable=False),
        sa.Column("departure_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("arrival_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("total_seats", sa.Integer(), nullable=False),
        sa.Column("available_seats", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("available_seats >= 0", name="check_transport_available_seats_non_negative"),
        sa.CheckConstraint("total_seats > 0", name="check_transport_total_seats_positive"),
        sa.CheckConstraint("available_seats <= total_seats", name="check_transport_available_lte_total"),
    )
    op.create_index("ix_transport_options_origin", "transport_options", ["origin"])
    op.create_index("ix_transport_options_destination", "transport_options", ["destination"])

    op.create_table(
        "flights",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("airline", sa.String(100), nullable=False),
        sa.Column("flight_number", sa.String(20), nullable=False),
        sa.Column("origin_airport", sa.String(3), nullable=False),
        sa.Column("destination_airport", sa.String(3), nullable=False),
        sa.Column("departure_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("arrival_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("class_type", sa.String(20), nullable=False, server_default="economy"),
        sa.Column("available_seats", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_flights_origin_airport", "flights", ["origin_airport"])
    op.create_index("ix_flights_destination_airport", "flights", ["destination_airport"])

    op.create_table(
        "dining_venues",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cuisine_type", sa.String(50), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("price_range", sa.Integer(), nullable=False, server_default=sa.text("2")),
        sa.Column("average_rating", sa.Numeric(2, 1), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_dining_venues_city", "dining_venues", ["city"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("booking_type", sa.String(20), nullable=False),
        sa.Column("reference_id", sa.String(36), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("booking_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("guests", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("guests > 0", name="check_booking_guests_positive"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_booking_status",
        ),
        sa.CheckConstraint(
            "booking_type IN ('accommodation', 'event', 'transport', 'flight', 'dining')",
            name="check_booking_type",
        ),
    )
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    # Overlap scans for stays: same resource, live statuses
    op.create_index("ix_bookings_reference", "bookings", ["booking_type", "reference_id", "status"])

    op.create_table(
        "saved_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("item_type", sa.String(20), nullable=False),
        sa.Column("item_id", sa.String(36), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # Backs the duplicate-save check against concurrent requests
        sa.UniqueConstraint("user_id", "item_type", "item_id", name="uq_saved_item_user_item"),
        sa.CheckConstraint(
            "item_type IN ('accommodation', 'event', 'transport', 'flight', 'dining')",
            name="check_saved_item_type",
        ),
    )
    op.create_index("ix_saved_items_user_id", "saved_items", ["user_id"])


def downgrade() -> None:
    op.drop_table("saved_items")
    op.drop_table("bookings")
    op.drop_table("dining_venues")
    op.drop_table("flights")
    op.drop_table("transport_options")
    op.drop_table("events")
    op.drop_table("accommodations")
