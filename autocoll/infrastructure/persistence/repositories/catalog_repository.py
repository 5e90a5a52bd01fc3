"""
Implémentation SQLModel du catalogue.

Implémente ICatalog en lecture seule sur les tables media_items, episodes
et credits.
"""

from sqlmodel import Session, col, select

from autocoll.core.entities.media import Credit, Episode, MediaEntity, MediaKind, PersonRole
from autocoll.core.ports.catalog import ICatalog
from autocoll.core.value_objects.entity_query import EntityQuery
from autocoll.infrastructure.persistence.models import CreditModel, EpisodeModel, MediaItemModel
from autocoll.infrastructure.persistence.repositories.base import collaborator_errors


def to_media_entity(model: MediaItemModel) -> MediaEntity:
    """
    Convertit un modèle DB en entité domaine.

    Args:
        model: Le modèle MediaItemModel depuis la DB

    Returns:
        L'entité MediaEntity correspondante
    """
    return MediaEntity(
        id=str(model.id),
        kind=MediaKind(model.kind),
        title=model.title,
        premiere_date=model.premiere_date,
        production_year=model.production_year,
        date_added=model.date_added,
        genres=tuple(model.genres),
        studios=tuple(model.studios),
        tags=tuple(model.tags),
        official_rating=model.official_rating,
        custom_rating=model.custom_rating,
        community_rating=model.community_rating,
        critic_rating=model.critic_rating,
        production_locations=tuple(model.production_locations),
        audio_languages=tuple(model.audio_languages),
        subtitle_languages=tuple(model.subtitle_languages),
        path=model.path,
        is_virtual=model.is_virtual,
    )


def _matches_names(values: list[str], wanted: tuple[str, ...]) -> bool:
    return not wanted or any(value in wanted for value in values)


class SQLModelCatalog(ICatalog):
    """
    Catalogue SQLModel.

    Les filtres de genres, tags et studios (listes JSON) sont appliqués
    après lecture ; les autres filtres sont traduits en SQL.
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le catalogue avec une session SQLModel.

        Args:
            session: Session SQLModel active pour les opérations DB
        """
        self._session = session

    def _to_episode(self, model: EpisodeModel) -> Episode:
        return Episode(
            id=str(model.id),
            series_id=str(model.series_id),
            title=model.title,
            premiere_date=model.premiere_date,
            path=model.path,
            audio_languages=tuple(model.audio_languages),
            subtitle_languages=tuple(model.subtitle_languages),
            is_virtual=model.is_virtual,
        )

    def query_entities(self, query: EntityQuery) -> list[MediaEntity]:
        """Retourne les entités correspondant au filtre, par ordre d'identifiant."""
        statement = select(MediaItemModel)
        if query.kinds:
            statement = statement.where(col(MediaItemModel.kind).in_([k.value for k in query.kinds]))
        if not query.include_virtual:
            statement = statement.where(MediaItemModel.is_virtual == False)  # noqa: E712
        if query.person_name is not None:
            credited = select(CreditModel.media_item_id).where(
                CreditModel.person_name == query.person_name
            )
            if query.person_roles:
                credited = credited.where(
                    col(CreditModel.role).in_([r.value for r in query.person_roles])
                )
            statement = statement.where(col(MediaItemModel.id).in_(credited))
        statement = statement.order_by(MediaItemModel.id)

        with collaborator_errors("Lecture du catalogue"):
            models = self._session.exec(statement).all()

        return [
            to_media_entity(model)
            for model in models
            if _matches_names(model.genres, query.genres)
            and _matches_names(model.tags, query.tags)
            and _matches_names(model.studios, query.studios)
        ]

    def get_credits(self, entity_id: str) -> list[Credit]:
        """Retourne les crédits d'une entité."""
        statement = (
            select(CreditModel)
            .where(CreditModel.media_item_id == int(entity_id))
            .order_by(CreditModel.id)
        )
        with collaborator_errors(f"Lecture des crédits de {entity_id}"):
            models = self._session.exec(statement).all()
        return [Credit(person_name=m.person_name, role=PersonRole(m.role)) for m in models]

    def list_person_names(self) -> list[str]:
        """Retourne les noms distincts des personnes créditées."""
        statement = select(CreditModel.person_name).distinct().order_by(CreditModel.person_name)
        with collaborator_errors("Lecture des personnes"):
            return list(self._session.exec(statement).all())

    def get_episodes(self, series_id: str) -> list[Episode]:
        """Retourne les épisodes non virtuels d'une série."""
        statement = (
            select(EpisodeModel)
            .where(EpisodeModel.series_id == int(series_id))
            .where(EpisodeModel.is_virtual == False)  # noqa: E712
            .order_by(EpisodeModel.id)
        )
        with collaborator_errors(f"Lecture des épisodes de {series_id}"):
            models = self._session.exec(statement).all()
        return [self._to_episode(model) for model in models]
