"""
Integration tests package.

Tests de integración contra SQLite en memoria (aiosqlite) que verifican:
- Repositorios SQL y el transaction manager
- Proveedor de tarifas con caché
- Reintento ante deadlocks

Para ejecutar solo tests de integración:
    pytest tests/integration/
"""
