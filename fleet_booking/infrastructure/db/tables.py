from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

# Todas las columnas DateTime guardan UTC sin zona.

vehicles = Table(
    "vehicles",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("status", String(20), nullable=False),
    Column("approval_status", String(20), nullable=False),
    Column("day_rate", Numeric(14, 2), nullable=False),
    Column("night_rate", Numeric(14, 2), nullable=False),
    Column("full_day_rate", Numeric(14, 2), nullable=False),
    Column("airport_pickup_rate", Numeric(14, 2), nullable=False),
    Column("fuel_upgrade_rate", Numeric(14, 2)),
    Column("pricing_includes_fuel", Boolean, nullable=False, default=False),
)

customers = Table(
    "customers",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("phone", String(50)),
    Column("referred_by_customer_id", String(36)),
    Column("referral_discount_used", Boolean, nullable=False, default=False),
    Column("credits_balance", Numeric(14, 2), nullable=False, default=0),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("booking_reference", String(32), nullable=False, unique=True),
    Column("vehicle_id", String(36), nullable=False, index=True),
    Column("booking_type", String(20), nullable=False),
    Column("start_date", DateTime, nullable=False),
    Column("end_date", DateTime, nullable=False),
    Column("pickup_location", String(500), nullable=False),
    Column("return_location", String(500), nullable=False),
    Column("customer_id", String(36), index=True),
    Column("guest_email", String(255)),
    Column("guest_name", String(255)),
    Column("guest_phone", String(50)),
    Column("status", String(20), nullable=False),
    Column("payment_status", String(20), nullable=False),
    Column("payment_intent", String(255)),
    Column("flight_number", String(20)),
    Column("flight_id", String(64)),
    Column("special_requests", Text),
    Column("total_amount", Numeric(14, 2), nullable=False),
    Column("net_total", Numeric(14, 2), nullable=False),
    Column("security_detail_cost", Numeric(14, 2)),
    Column("fuel_upgrade_cost", Numeric(14, 2)),
    Column("platform_fee_base", Numeric(14, 2), nullable=False),
    Column("platform_customer_service_fee_rate_percent", Numeric(5, 2), nullable=False),
    Column("platform_customer_service_fee_amount", Numeric(14, 2), nullable=False),
    Column("subtotal_before_discounts", Numeric(14, 2), nullable=False),
    Column("subtotal_before_vat", Numeric(14, 2), nullable=False),
    Column("vat_rate_percent", Numeric(5, 2), nullable=False),
    Column("vat_amount", Numeric(14, 2), nullable=False),
    Column("platform_fleet_owner_commission_rate_percent", Numeric(5, 2), nullable=False),
    Column("platform_fleet_owner_commission_amount", Numeric(14, 2), nullable=False),
    Column("fleet_owner_payout_amount_net", Numeric(14, 2), nullable=False),
    Column("referral_referrer_customer_id", String(36)),
    Column("referral_discount_amount", Numeric(14, 2), nullable=False, default=0),
    Column("referral_status", String(20), nullable=False),
    Column("referral_credits_used", Numeric(14, 2), nullable=False, default=0),
    Column("referral_credits_reserved", Numeric(14, 2), nullable=False, default=0),
)

booking_legs = Table(
    "booking_legs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", String(36), nullable=False, index=True),
    Column("leg_date", DateTime, nullable=False),
    Column("leg_start_time", DateTime, nullable=False),
    Column("leg_end_time", DateTime, nullable=False),
    Column("total_daily_price", Numeric(14, 2), nullable=False),
    Column("items_net_value_for_leg", Numeric(14, 2), nullable=False),
    Column("platform_commission_rate_on_leg", Numeric(5, 2), nullable=False),
    Column("platform_commission_amount_on_leg", Numeric(14, 2), nullable=False),
    Column("fleet_owner_earning_for_leg", Numeric(14, 2), nullable=False),
)

flights = Table(
    "flights",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("flight_number", String(20), nullable=False),
    Column("flight_date", DateTime, nullable=False),
    Column("origin_code", String(10), nullable=False),
    Column("origin_code_iata", String(5)),
    Column("origin_name", String(255)),
    Column("destination_code", String(10), nullable=False),
    Column("destination_code_iata", String(5)),
    Column("destination_name", String(255)),
    Column("destination_city", String(255)),
    Column("scheduled_arrival", DateTime, nullable=False),
    Column("status", String(20), nullable=False),
)

referral_program_config = Table(
    "referral_program_config",
    metadata,
    Column("key", String(64), primary_key=True),
    Column("value", JSON),
)

referral_rewards = Table(
    "referral_rewards",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("referrer_id", String(36), nullable=False, index=True),
    Column("referee_id", String(36), nullable=False),
    Column("booking_id", String(36), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("status", String(20), nullable=False),
    Column("release_condition", String(20), nullable=False),
    Column("created_at", DateTime, nullable=False),
    UniqueConstraint("booking_id", name="uq_referral_rewards_booking"),
)

referral_stats = Table(
    "referral_stats",
    metadata,
    Column("customer_id", String(36), primary_key=True),
    Column("total_referrals", Integer, nullable=False, default=0),
    Column("total_rewards_granted", Numeric(14, 2), nullable=False, default=0),
    Column("total_rewards_pending", Numeric(14, 2), nullable=False, default=0),
)

platform_fee_rates = Table(
    "platform_fee_rates",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("fee_type", String(32), nullable=False),
    Column("rate_percent", Numeric(5, 2), nullable=False),
    Column("effective_since", DateTime, nullable=False),
    Column("effective_until", DateTime),
)

tax_rates = Table(
    "tax_rates",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("rate_percent", Numeric(5, 2), nullable=False),
    Column("effective_since", DateTime, nullable=False),
    Column("effective_until", DateTime),
)

addon_rates = Table(
    "addon_rates",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("addon_type", String(32), nullable=False),
    Column("rate_amount", Numeric(14, 2), nullable=False),
    Column("effective_since", DateTime, nullable=False),
    Column("effective_until", DateTime),
)
