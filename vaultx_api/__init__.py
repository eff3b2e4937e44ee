"""Capa de servicios consumida por la interfaz de usuario."""
