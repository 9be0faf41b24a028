"""Servicios de aplicación reutilizados por los casos de uso."""
