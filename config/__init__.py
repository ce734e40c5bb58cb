"""Configuración transversal de la aplicación (logging)."""
