"""
Objet valeur décrivant une requête sur le catalogue.
"""

from dataclasses import dataclass

from autocoll.core.entities.media import MediaKind, PersonRole


@dataclass(frozen=True)
class EntityQuery:
    """
    Filtre de sélection d'entités du catalogue.

    Les filtres de noms (genres, tags, studios, personne) sont des égalités exactes ;
    une entité doit satisfaire chacun des filtres renseignés.

    Attributes:
        kinds: Types d'entités à inclure (vide = tous)
        person_name: Nom exact d'une personne créditée
        person_roles: Rôles acceptés pour person_name (vide = tous)
        genres: L'entité doit avoir au moins un de ces genres
        tags: L'entité doit avoir au moins un de ces tags
        studios: L'entité doit avoir au moins un de ces studios
        include_virtual: Inclure les éléments virtuels (sans média)
        recursive: Parcourir toute la hiérarchie du catalogue
    """

    kinds: tuple[MediaKind, ...] = ()
    person_name: str | None = None
    person_roles: tuple[PersonRole, ...] = ()
    genres: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    studios: tuple[str, ...] = ()
    include_virtual: bool = False
    recursive: bool = True

    @classmethod
    def of_kind(cls, kind: MediaKind) -> "EntityQuery":
        """Requête de toutes les entités non virtuelles d'un type."""
        return cls(kinds=(kind,))
