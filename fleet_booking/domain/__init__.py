"""Dominio: modelo y reglas puras del flujo de reservas."""
