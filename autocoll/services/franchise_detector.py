"""
Détection de sagas (franchises) par motifs de titre.

Ce module regroupe une liste plate d'entités titrées en sagas : un titre de
base est extrait en retirant un suffixe de numérotation (épisode, partie,
chapitre, chiffre romain, nombre), puis normalisé (article initial, ponctuation,
casse) pour former la clé de regroupement.

Exemple : "John Wick", "John Wick 2", "John Wick: Chapter 3"
→ saga "John Wick", séquences [0, 2, 3]
"""

import re
from dataclasses import dataclass, field

from loguru import logger

from autocoll.core.entities.collection import DiscoveredFranchise, FranchiseMember
from autocoll.core.entities.media import MediaEntity
from autocoll.utils.constants import DEFAULT_MOVIE_SERIES_PATTERN, FRANCHISE_ARTICLES

_ROMAN = r"I{1,3}|IV|V|VI{0,3}|IX|X|XI{0,3}"

_EPISODE_RE = re.compile(
    rf"^(.+?)\s*[\s:\-]+\s*(?:Episode|Ep\.?)\s*(\d+|{_ROMAN})\s*$", re.IGNORECASE
)
_PART_RE = re.compile(
    rf"^(.+?)\s*[\s:\-]+\s*(?:Part|Pt\.?|Teil|Vol\.?|Volume)\s*(\d+|{_ROMAN})\s*$", re.IGNORECASE
)
_CHAPTER_RE = re.compile(
    rf"^(.+?)\s*[\s:\-]+\s*(?:Chapter|Ch\.?|Kapitel)\s*(\d+|{_ROMAN})\s*$", re.IGNORECASE
)
# Chiffre romain en majuscules, séparé du titre : "Rocky IV" mais pas "The Matrix"
_ROMAN_AT_END_RE = re.compile(rf"^(.+?)[\s:\-]+({_ROMAN})\s*$")
_NUMBER_AT_END_RE = re.compile(r"^(.+?)\s*[\s:\-]+\s*(\d+)\s*$")
_SPINOFF_RE = re.compile(
    r"^.+?:\s*(?:A|An|The)?\s*(.+?)\s*(?:Story|Tale|Adventure|Chronicle|Movie)\s*$",
    re.IGNORECASE,
)
_TRAILING_SEPARATORS_RE = re.compile(r"[\s:\-]+$")

# Ordre de priorité de l'extraction du titre de base
_BASE_TITLE_PATTERNS = (_EPISODE_RE, _PART_RE, _CHAPTER_RE, _ROMAN_AT_END_RE, _NUMBER_AT_END_RE)

_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}


def extract_base_title(title: str) -> str:
    """
    Extrait le titre de base d'un titre numéroté.

    Args:
        title: Titre complet (ex: "Rocky IV", "Harry Potter Part 2")

    Returns:
        Titre de base sans numérotation, ou chaîne vide si le titre
        ne porte aucun suffixe de numérotation.
    """
    if not title or not title.strip():
        return ""

    text = title.strip()
    for pattern in _BASE_TITLE_PATTERNS:
        match = pattern.match(text)
        if match:
            return _TRAILING_SEPARATORS_RE.sub("", match.group(1).strip()).strip()
    return ""


def strip_leading_article(title: str) -> str:
    """Retire un article initial (anglais ou allemand) suivi d'un espace."""
    for article in FRANCHISE_ARTICLES:
        prefix = article + " "
        if title[: len(prefix)].lower() == prefix.lower():
            return title[len(prefix):].strip()
    return title


def normalize_title(title: str) -> str:
    """
    Normalise un titre pour le regroupement.

    Retire l'article initial, remplace la ponctuation par des espaces,
    réduit les espaces et passe en minuscules.
    """
    normalized = strip_leading_article(title.strip())
    normalized = re.sub(r"[^\w\s]", " ", normalized)
    normalized = re.sub(r"\s+", " ", normalized).strip()
    return normalized.lower()


def roman_to_int(roman: str) -> int:
    """Convertit un nombre romain (règles soustractives). Retourne 0 si invalide."""
    if not roman or not roman.strip():
        return 0

    result = 0
    previous = 0
    for char in reversed(roman.strip().upper()):
        value = _ROMAN_VALUES.get(char)
        if value is None:
            return 0
        if value < previous:
            result -= value
        else:
            result += value
        previous = value
    return result


def sequence_number(title: str) -> int:
    """
    Numéro d'ordre d'un titre dans sa saga (0 si non numéroté).

    Ordre de recherche : nombre final, chiffre romain final, puis
    partie / épisode / chapitre.
    """
    if not title or not title.strip():
        return 0

    match = _NUMBER_AT_END_RE.match(title)
    if match:
        return int(match.group(2))

    match = _ROMAN_AT_END_RE.match(title)
    if match:
        return roman_to_int(match.group(2))

    for pattern in (_PART_RE, _EPISODE_RE, _CHAPTER_RE):
        match = pattern.match(title)
        if match:
            number = match.group(2)
            return int(number) if number.isdigit() else roman_to_int(number)
    return 0


def apply_naming_pattern(base_title: str, pattern: str, prefix: str = "") -> str:
    """Construit le nom de collection : {Title} remplacé, préfixe ajouté."""
    name = pattern.replace("{Title}", base_title)
    if prefix:
        name = prefix + name
    return name


def best_base_title(members: list[MediaEntity]) -> str:
    """
    Choisit le titre de base affiché d'une saga.

    Le titre du premier membre sans suffixe de numérotation est préféré ;
    à défaut, le titre de base extrait du premier membre, avec une majuscule
    initiale.
    """
    for entity in members:
        title = entity.title or ""
        if not extract_base_title(title):
            return _TRAILING_SEPARATORS_RE.sub("", title).strip()

    first_title = members[0].title or ""
    first_base = extract_base_title(first_title)
    if first_base:
        return first_base[0].upper() + first_base[1:]
    return first_title or "Unknown Series"


@dataclass
class _Group:
    members: list[MediaEntity] = field(default_factory=list)
    ids: set[str] = field(default_factory=set)

    def add(self, entity: MediaEntity) -> bool:
        if entity.id in self.ids:
            return False
        self.members.append(entity)
        self.ids.add(entity.id)
        return True


class FranchiseDetector:
    """
    Service de détection des sagas.

    Méthodes :
        detect: Regroupe des entités en sagas ordonnées.
    """

    def detect(
        self,
        entities: list[MediaEntity],
        min_size: int = 2,
        include_unnumbered_first: bool = True,
        include_spinoffs: bool = False,
        naming_pattern: str = DEFAULT_MOVIE_SERIES_PATTERN,
        prefix: str = "",
    ) -> list[DiscoveredFranchise]:
        """
        Détecte les sagas parmi des entités.

        Args:
            entities: Entités à analyser (en pratique, les films)
            min_size: Taille minimale d'une saga
            include_unnumbered_first: Rattacher le premier épisode non numéroté
                (titre normalisé égal au titre de base, avec ou sans "the")
            include_spinoffs: Rattacher les dérivés "X: Y Story/Tale/..."
            naming_pattern: Motif du nom de collection ({Title})
            prefix: Préfixe ajouté au nom de collection

        Returns:
            Sagas détectées, membres triés par numéro de séquence.
        """
        logger.info(f"Analyse de {len(entities)} entité(s) pour la détection de sagas")

        groups: dict[str, _Group] = {}
        for entity in entities:
            if not entity.title or not entity.title.strip():
                continue
            base = extract_base_title(entity.title)
            if base:
                groups.setdefault(normalize_title(base), _Group()).add(entity)

        if include_unnumbered_first:
            self._attach_unnumbered_first(entities, groups)
        if include_spinoffs:
            self._attach_spinoffs(entities, groups)

        franchises = []
        for group in groups.values():
            if len(group.members) < min_size:
                continue
            base_title = best_base_title(group.members)
            ordered = sorted(group.members, key=lambda e: sequence_number(e.title))
            franchises.append(
                DiscoveredFranchise(
                    base_title=base_title,
                    collection_name=apply_naming_pattern(base_title, naming_pattern, prefix),
                    members=[FranchiseMember(e, sequence_number(e.title)) for e in ordered],
                )
            )

        logger.info(f"{len(franchises)} saga(s) détectée(s)")
        for franchise in franchises:
            logger.debug(f"Saga : {franchise.base_title} ({len(franchise.members)} entité(s))")
        return franchises

    def _attach_unnumbered_first(
        self, entities: list[MediaEntity], groups: dict[str, _Group]
    ) -> None:
        """Rattache les entités dont le titre normalisé est le titre de base."""
        for base, group in groups.items():
            for entity in entities:
                if entity.id in group.ids:
                    continue
                normalized = normalize_title(entity.title or "")
                if normalized == base or normalized == "the " + base or "the " + normalized == base:
                    group.add(entity)
                    logger.debug(f"'{entity.title}' rattaché comme premier épisode de '{base}'")

    def _attach_spinoffs(self, entities: list[MediaEntity], groups: dict[str, _Group]) -> None:
        """Rattache les dérivés dont le fragment recoupe un titre de base existant."""
        bases = list(groups)
        for entity in entities:
            if not entity.title or not entity.title.strip():
                continue
            match = _SPINOFF_RE.match(entity.title)
            if not match:
                continue
            fragment = normalize_title(match.group(1))
            for base in bases:
                if fragment in base or base in fragment:
                    if groups[base].add(entity):
                        logger.debug(f"'{entity.title}' rattaché comme dérivé de '{base}'")
                    break
