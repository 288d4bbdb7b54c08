from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
)

metadata = MetaData()

listings = Table(
    "listings",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("vendor_id", Uuid, nullable=False),
    Column("title", String(255), nullable=False),
    Column("category", String(32), nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False, default="USD"),
    Column("capacity", Integer),
    Column("available_from", DateTime(timezone=True)),
    Column("available_to", DateTime(timezone=True)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("rating", Numeric(3, 2), nullable=False, default=0),
    Column("review_count", Integer, nullable=False, default=0),
)

trip_dates = Table(
    "trip_dates",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("listing_id", Uuid, ForeignKey("listings.id"), nullable=False),
    Column("start_date", DateTime(timezone=True), nullable=False),
    Column("end_date", DateTime(timezone=True), nullable=False),
    Column("max_capacity", Integer),
    Column("current_bookings", Integer, nullable=False, default=0),
    Column("is_active", Boolean, nullable=False, default=True),
    Index("ix_trip_dates_listing_start", "listing_id", "start_date"),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("customer_id", Uuid, nullable=False),
    Column("listing_id", Uuid, ForeignKey("listings.id"), nullable=False),
    Column("trip_date_id", Uuid, ForeignKey("trip_dates.id")),
    Column("check_in_date", DateTime(timezone=True)),
    Column("check_out_date", DateTime(timezone=True)),
    Column("number_of_guests", Integer, nullable=False),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("status", String(32), nullable=False),
    Column("payment_status", String(32), nullable=False),
    Column("payment_id", String(255)),
    Column("special_requests", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_bookings_listing_status", "listing_id", "status"),
    Index("ix_bookings_customer_created", "customer_id", "created_at"),
    Index("ix_bookings_payment_id", "payment_id"),
)

notifications = Table(
    "notifications",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", Uuid, nullable=False),
    Column("title", String(255), nullable=False),
    Column("body", Text, nullable=False),
    Column("type", String(32), nullable=False),
    Column("reference_id", Uuid),
    Column("is_read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_notifications_user_created", "user_id", "created_at"),
    # one notification of each type per booking
    Index("uq_notifications_reference_type", "reference_id", "type", unique=True),
)
