"""Utilitaires partagés."""
