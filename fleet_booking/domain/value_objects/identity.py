"""Identidad de quien reserva: cliente autenticado o invitado."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedCustomer:
    """Reserva hecha por un cliente con sesión."""

    customer_id: str


@dataclass(frozen=True)
class GuestContact:
    """Reserva hecha por un invitado; los tres campos son obligatorios."""

    email: str
    name: str
    phone: str


BookingIdentity = AuthenticatedCustomer | GuestContact
