"""
AutoColl - Collections automatiques ("smart collections") pour catalogue multimédia.

Ce package maintient des collections gérées (films, séries) dont l'appartenance est
recalculée à chaque exécution à partir de règles simples, d'expressions de critères
ou d'une découverte automatique (sagas, genres, studios, décennies).

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, erreurs)
- services/ : Couche application (parseur d'expressions, évaluation, réconciliation)
- infrastructure/ : Persistance SQLModel des ports
- adapters/ : Interface CLI
"""

__version__ = "0.1.0"
