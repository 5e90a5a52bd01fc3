"""Persistance SQLite du catalogue et des collections via SQLModel."""
