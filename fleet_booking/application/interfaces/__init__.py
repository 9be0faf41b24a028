"""Puertos (interfaces) que la capa de aplicación consume."""
