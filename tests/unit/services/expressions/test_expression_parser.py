"""
Tests unitaires du parseur d'expressions de critères.

Vérifie :
- Les priorités NOT > AND > OR et l'associativité à gauche
- Les mots-clés insensibles à la casse, les alias et les opérateurs symboliques
- Les chaînes entre guillemets (simples, doubles, échappements)
- La forme canonique et la ré-analyse
- La collecte de toutes les erreurs de syntaxe, sans arbre partiel
"""

import pytest

from autocoll.core.value_objects.criteria import Criterion, CriterionType
from autocoll.services.expressions import (
    And,
    ExpressionParser,
    Group,
    Leaf,
    Not,
    Or,
    parse,
    serialize,
)
from autocoll.services.expressions.parser import MAX_NESTING_DEPTH


def leaf(ctype: CriterionType, value: str = "") -> Leaf:
    return Leaf(Criterion(ctype, value))


GENRE_A = leaf(CriterionType.GENRE, "A")
GENRE_B = leaf(CriterionType.GENRE, "B")
GENRE_C = leaf(CriterionType.GENRE, "C")


# ============================================================================
# Structure de l'arbre
# ============================================================================


class TestParseStructure:
    """Tests de la forme de l'arbre produit."""

    def test_single_criterion(self) -> None:
        """Un critère seul donne une feuille."""
        result = parse('GENRE "Action"')

        assert result.ok
        assert result.expression == leaf(CriterionType.GENRE, "Action")
        assert result.errors == []

    def test_and_binds_tighter_than_or(self) -> None:
        """A OR B AND C se lit A OR (B AND C)."""
        result = parse('GENRE "A" OR GENRE "B" AND GENRE "C"')

        assert result.expression == Or(GENRE_A, And(GENRE_B, GENRE_C))

    def test_not_binds_tighter_than_and(self) -> None:
        """NOT A AND B se lit (NOT A) AND B."""
        result = parse('NOT GENRE "A" AND GENRE "B"')

        assert result.expression == And(Not(GENRE_A), GENRE_B)

    def test_and_is_left_associative(self) -> None:
        """A AND B AND C se lit (A AND B) AND C."""
        result = parse('GENRE "A" AND GENRE "B" AND GENRE "C"')

        assert result.expression == And(And(GENRE_A, GENRE_B), GENRE_C)

    def test_or_is_left_associative(self) -> None:
        result = parse('GENRE "A" OR GENRE "B" OR GENRE "C"')

        assert result.expression == Or(Or(GENRE_A, GENRE_B), GENRE_C)

    def test_parentheses_override_precedence(self) -> None:
        """Les parenthèses produisent un noeud Group explicite."""
        result = parse('(GENRE "A" OR GENRE "B") AND UNPLAYED')

        assert result.expression == And(
            Group(Or(GENRE_A, GENRE_B)), leaf(CriterionType.UNPLAYED)
        )

    def test_nested_not(self) -> None:
        result = parse('NOT NOT GENRE "A"')

        assert result.expression == Not(Not(GENRE_A))

    def test_state_criteria_take_no_value(self) -> None:
        """MOVIE, SHOW, UNPLAYED et WATCHED n'ont pas d'opérande."""
        result = parse("MOVIE OR SHOW")

        assert result.expression == Or(
            leaf(CriterionType.MEDIA_KIND_MOVIE), leaf(CriterionType.MEDIA_KIND_SHOW)
        )


# ============================================================================
# Mots-clés, alias, symboles
# ============================================================================


class TestKeywords:
    """Tests de la reconnaissance des mots-clés."""

    def test_keywords_are_case_insensitive(self) -> None:
        result = parse('genre "Action" and not watched')

        assert result.expression == And(
            leaf(CriterionType.GENRE, "Action"), Not(leaf(CriterionType.WATCHED))
        )

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('NAME "Alien"', leaf(CriterionType.TITLE, "Alien")),
            ('PATH "/films"', leaf(CriterionType.FILENAME, "/films")),
            ('COUNTRY "France"', leaf(CriterionType.PRODUCTION_LOCATION, "France")),
            ('RATING "PG-13"', leaf(CriterionType.PARENTAL_RATING, "PG-13")),
            ('COMMUNITY ">7"', leaf(CriterionType.COMMUNITY_RATING, ">7")),
            ('ADDED "<30"', leaf(CriterionType.ADDED_DATE, "<30")),
            ("SERIES", leaf(CriterionType.MEDIA_KIND_SHOW)),
            ("FILM", leaf(CriterionType.MEDIA_KIND_MOVIE)),
            ("UNWATCHED", leaf(CriterionType.UNPLAYED)),
            ("PLAYED", leaf(CriterionType.WATCHED)),
        ],
    )
    def test_aliases_resolve_to_canonical_type(self, text, expected) -> None:
        """Un alias produit le même critère que le mot-clé canonique."""
        assert parse(text).expression == expected

    def test_symbolic_operators(self) -> None:
        """&&, || et ! sont équivalents à AND, OR et NOT."""
        symbolic = parse('GENRE "A" && !WATCHED || MOVIE')
        words = parse('GENRE "A" AND NOT WATCHED OR MOVIE')

        assert symbolic.ok
        assert symbolic.expression == words.expression


# ============================================================================
# Valeurs entre guillemets
# ============================================================================


class TestQuotedValues:
    """Tests des opérandes entre guillemets."""

    def test_single_quotes(self) -> None:
        result = parse("TITLE 'Amélie'")

        assert result.expression == leaf(CriterionType.TITLE, "Amélie")

    def test_value_keeps_inner_spaces_and_keywords(self) -> None:
        """Le contenu d'une chaîne n'est jamais interprété."""
        result = parse('TITLE "War and Peace OR NOT"')

        assert result.expression == leaf(CriterionType.TITLE, "War and Peace OR NOT")

    def test_escaped_double_quote(self) -> None:
        result = parse('TITLE "The \\"Best\\" Film"')

        assert result.expression == leaf(CriterionType.TITLE, 'The "Best" Film')

    def test_backslash_before_other_character_is_kept(self) -> None:
        """Un chemin Windows reste intact."""
        result = parse(r'FILENAME "C:\Movies\Alien"')

        assert result.expression == leaf(CriterionType.FILENAME, r"C:\Movies\Alien")

    def test_empty_value(self) -> None:
        result = parse('TAG ""')

        assert result.expression == leaf(CriterionType.TAG, "")


# ============================================================================
# Forme canonique
# ============================================================================


class TestCanonicalText:
    """Tests de la sérialisation et de la ré-analyse."""

    def test_canonical_form_uses_uppercase_keywords(self) -> None:
        result = parse('genre "Action" and not watched')

        assert serialize(result.expression) == 'GENRE "Action" AND NOT WATCHED'

    def test_aliases_serialize_to_canonical_keyword(self) -> None:
        result = parse('name "Alien" || unwatched')

        assert serialize(result.expression) == 'TITLE "Alien" OR UNPLAYED'

    @pytest.mark.parametrize(
        "text",
        [
            'GENRE "Action"',
            'GENRE "A" OR GENRE "B" AND GENRE "C"',
            '(GENRE "A" OR GENRE "B") AND NOT (STUDIO "X" OR WATCHED)',
            'NOT NOT MOVIE AND YEAR ">=2000"',
            'TITLE "The \\"Best\\" Film" OR FILENAME "C:\\\\dir"',
            "SHOW AND EPISODEAIRDATE \"<7\" AND UNPLAYED",
        ],
    )
    def test_reparse_of_canonical_text_gives_same_tree(self, text) -> None:
        """parse(serialize(e)) reproduit exactement l'arbre e."""
        first = parse(text)
        second = parse(serialize(first.expression))

        assert second.ok
        assert second.expression == first.expression

    def test_parser_is_reusable(self) -> None:
        """Un même parseur analyse plusieurs expressions indépendantes."""
        parser = ExpressionParser()

        bad = parser.parse('GENRE "A" AND')
        good = parser.parse('GENRE "A"')

        assert not bad.ok
        assert good.ok
        assert good.errors == []


# ============================================================================
# Erreurs de syntaxe
# ============================================================================


class TestSyntaxErrors:
    """Tests de la collecte des erreurs."""

    def test_trailing_operator(self) -> None:
        """Un AND final est une erreur en fin d'expression, sans arbre partiel."""
        text = 'GENRE "Action" AND'
        result = parse(text)

        assert not result.ok
        assert result.expression is None
        assert len(result.errors) == 1
        assert result.errors[0].position == len(text)
        assert "unexpected end of expression" in result.errors[0].message

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_expression(self, text) -> None:
        result = parse(text)

        assert not result.ok
        assert result.errors[0].message == "expression is empty"

    def test_criterion_without_value(self) -> None:
        result = parse("GENRE")

        assert result.error_messages == [
            "position 0: GENRE expects a quoted value, found end of expression"
        ]

    def test_all_errors_are_reported_in_text_order(self) -> None:
        """L'analyse continue après une erreur pour signaler les suivantes."""
        result = parse("GENRE AND TITLE")

        assert [e.position for e in result.errors] == [0, 10]
        assert "found 'AND'" in result.errors[0].message
        assert "TITLE expects a quoted value" in result.errors[1].message

    def test_unknown_keyword(self) -> None:
        result = parse('BOGUS "x"')

        assert not result.ok
        assert result.errors[0].message == "unknown keyword 'BOGUS'"
        assert result.errors[0].token == "BOGUS"

    def test_missing_closing_parenthesis(self) -> None:
        result = parse('(GENRE "A" OR GENRE "B"')

        assert len(result.errors) == 1
        assert "missing ')' for '(' at position 0" in result.errors[0].message

    def test_unbalanced_closing_parenthesis(self) -> None:
        result = parse('GENRE "A")')

        assert result.errors[0].message == "unbalanced ')' without matching '('"
        assert result.errors[0].position == 9

    def test_empty_parentheses(self) -> None:
        result = parse("() AND MOVIE")

        assert result.errors[0].message == "empty parentheses"

    def test_missing_operator_between_criteria(self) -> None:
        result = parse('GENRE "A" GENRE "B"')

        assert len(result.errors) == 1
        assert result.errors[0].message == "expected AND or OR before 'GENRE'"

    def test_value_without_criterion(self) -> None:
        result = parse('"Action"')

        assert "has no criterion" in result.errors[0].message

    def test_unterminated_string(self) -> None:
        result = parse('TITLE "Alien')

        assert not result.ok
        assert result.errors[0].message == "unterminated quoted value"
        assert result.errors[0].position == 6

    def test_unexpected_character(self) -> None:
        result = parse('GENRE "A" # commentaire')

        assert not result.ok
        assert result.errors[0].message == "unexpected character '#'"

    def test_operator_at_start(self) -> None:
        result = parse('AND GENRE "A"')

        assert not result.ok
        assert result.errors[0].message == "expected a criterion before 'AND'"

    def test_missing_operator_inside_group(self) -> None:
        """Un opérateur manquant dans un groupe ne produit qu'une seule erreur."""
        result = parse('(GENRE "a" GENRE "b")')

        assert result.expression is None
        assert result.error_messages == ["position 11: expected AND or OR before 'GENRE'"]

    def test_missing_operator_inside_group_keeps_outer_expression(self) -> None:
        result = parse('(GENRE "a" NOT WATCHED) AND MOVIE')

        assert len(result.errors) == 1
        assert result.errors[0].message == "expected AND or OR before 'NOT'"


# ============================================================================
# Profondeur d'imbrication
# ============================================================================


class TestNestingDepth:
    """Tests de la limite d'imbrication des parenthèses et des NOT."""

    def test_deep_parentheses_are_reported_not_raised(self) -> None:
        result = parse("(" * 400 + "MOVIE" + ")" * 400)

        assert not result.ok
        assert result.expression is None
        assert result.error_messages == [
            f"position {MAX_NESTING_DEPTH}: expression is nested too deeply"
        ]

    def test_deep_negation_is_reported_not_raised(self) -> None:
        result = parse("NOT " * 500 + "WATCHED")

        assert not result.ok
        assert result.errors[0].message == "expression is nested too deeply"

    def test_nesting_below_limit_is_accepted(self) -> None:
        depth = MAX_NESTING_DEPTH - 1
        result = parse("(" * depth + "MOVIE" + ")" * depth)

        assert result.ok
        node = result.expression
        for _ in range(depth):
            assert isinstance(node, Group)
            node = node.inner
        assert node == leaf(CriterionType.MEDIA_KIND_MOVIE)
