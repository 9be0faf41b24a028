"""Adaptadores de infraestructura: SQL, memoria y pasarelas externas."""
