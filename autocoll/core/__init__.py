"""Couche domaine : entités, ports, objets valeur et erreurs."""
