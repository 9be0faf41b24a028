"""Constantes de negocio del flujo de reservas."""

from decimal import Decimal

# Estados de la reserva
BOOKING_STATUS_PENDING = "PENDING"
BOOKING_STATUS_CONFIRMED = "CONFIRMED"
BOOKING_STATUS_ACTIVE = "ACTIVE"

# Estados de pago
PAYMENT_STATUS_UNPAID = "UNPAID"
PAYMENT_STATUS_PAID = "PAID"
PAYMENT_STATUS_FAILED = "FAILED"

# Estados del referido en la reserva
REFERRAL_STATUS_NONE = "NONE"
REFERRAL_STATUS_APPLIED = "APPLIED"

# Recompensas de referidos
REFERRAL_REWARD_STATUS_PENDING = "PENDING"
REFERRAL_RELEASE_PAID = "PAID"
REFERRAL_RELEASE_COMPLETED = "COMPLETED"

# Claves de configuración del programa de referidos
REFERRAL_ENABLED_KEY = "REFERRAL_ENABLED"
REFERRAL_DISCOUNT_AMOUNT_KEY = "REFERRAL_DISCOUNT_AMOUNT"
REFERRAL_REWARD_AMOUNT_KEY = "REFERRAL_REWARD_AMOUNT"
REFERRAL_RELEASE_CONDITION_KEY = "REFERRAL_RELEASE_CONDITION"

# Ventana de preparación entre reservas (a cada lado)
BOOKING_BUFFER_HOURS = 2

# Reservas DAY del mismo día no se aceptan a partir de esta hora local
SAME_DAY_BOOKING_CUTOFF_HOUR = 11

# Aviso mínimo para recogidas en aeropuerto
AIRPORT_PICKUP_MIN_ADVANCE_MINUTES = 60

# Tolerancia entre el total declarado por el cliente y el calculado
PRICE_TOLERANCE = Decimal("0.01")

# Forma de los tramos
DAY_BOOKING_DURATION_HOURS = 12
NIGHT_START_HOUR = 23
NIGHT_END_HOUR = 5
FULL_DAY_DURATION_HOURS = 24
AIRPORT_PICKUP_BUFFER_MINUTES = 40
AIRPORT_PICKUP_DRIVE_TIME_MULTIPLIER = Decimal("1.2")
AIRPORT_PICKUP_DEFAULT_DRIVE_MINUTES = 120

# Máximo de tramos con derecho a tanque lleno
MAX_LEGS_FOR_FUEL_UPGRADE = 2

# Precisión monetaria persistida
MONEY_QUANTUM = Decimal("0.01")
