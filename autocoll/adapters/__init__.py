"""Adaptateurs d'entrée de l'application."""
