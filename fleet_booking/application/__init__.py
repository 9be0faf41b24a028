"""Capa de aplicación: puertos y casos de uso."""
