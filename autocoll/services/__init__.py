"""
Couche services applicatifs (cas d'utilisation).

Les services orchestrent la logique du domaine : analyse et évaluation des
expressions, détection de sagas, déduplication, réconciliation des collections
et orchestration d'une exécution complète.

Les services dépendent des ports (interfaces) de core/, jamais des
implémentations concrètes de infrastructure/ ou adapters/.
"""
