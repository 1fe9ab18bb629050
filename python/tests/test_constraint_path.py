"""Tests for constraint path parsing and simplification."""

import pytest

from credential_display.constraint_path import (
    PathSegment,
    SegmentKind,
    parse_path,
    simplify_path,
)
from credential_display.types import ClaimFormat, PathSyntaxError


class TestParsePath:
    def test_dot_notation(self):
        assert parse_path("$.vc.credentialSubject.age") == [
            PathSegment(SegmentKind.ROOT, "$"),
            PathSegment(SegmentKind.IDENTIFIER, "vc"),
            PathSegment(SegmentKind.IDENTIFIER, "credentialSubject"),
            PathSegment(SegmentKind.IDENTIFIER, "age"),
        ]

    def test_bracket_notation(self):
        assert parse_path("$['org.iso.18013.5.1'][\"family_name\"][0][*]") == [
            PathSegment(SegmentKind.ROOT, "$"),
            PathSegment(SegmentKind.STRING_LITERAL, "org.iso.18013.5.1"),
            PathSegment(SegmentKind.STRING_LITERAL, "family_name"),
            PathSegment(SegmentKind.NUMERIC_LITERAL, 0),
            PathSegment(SegmentKind.WILDCARD),
        ]

    def test_spaces_inside_brackets(self):
        segments = parse_path("$[ 'a' ][ 2 ]")
        assert [s.kind for s in segments[1:]] == [
            SegmentKind.STRING_LITERAL,
            SegmentKind.NUMERIC_LITERAL,
        ]

    def test_escaped_quote(self):
        assert parse_path(r"$['it\'s']")[1].value == "it's"

    def test_dot_wildcard_and_index(self):
        kinds = [s.kind for s in parse_path("$.items.*.3")]
        assert kinds == [
            SegmentKind.ROOT,
            SegmentKind.IDENTIFIER,
            SegmentKind.WILDCARD,
            SegmentKind.NUMERIC_LITERAL,
        ]

    @pytest.mark.parametrize(
        "path",
        [
            "vc.name",
            "$..name",
            "$[?(@.age > 18)]",
            "$[0:2]",
            "$['open",
            "$[",
            "$.a b",
        ],
    )
    def test_unsupported_syntax_raises(self, path):
        with pytest.raises(PathSyntaxError):
            parse_path(path)


class TestSimplifyPath:
    def test_structural_segments_are_dropped(self):
        assert simplify_path("$.vc.credentialSubject.age") == ["age"]

    def test_vp_wrapper_is_dropped(self):
        assert simplify_path("$.vp.holder") == ["holder"]

    def test_root_only(self):
        assert simplify_path("$") == []

    def test_wildcards_and_indices_become_placeholders(self):
        assert simplify_path("$.degrees[*].type") == ["degrees", None, "type"]
        assert simplify_path("$.nationalities[0]") == ["nationalities", None]

    def test_mdoc_keeps_element_identifier(self):
        path = "$['org.iso.18013.5.1']['family_name']"
        assert simplify_path(path, ClaimFormat.MSO_MDOC) == ["family_name"]

    def test_mdoc_mode_accepts_plain_string(self):
        path = "$['org.iso.18013.5.1']['age_over_21']"
        assert simplify_path(path, "mso_mdoc") == ["age_over_21"]

    @pytest.mark.parametrize(
        "path",
        ["$['org.iso.18013.5.1']", "$['org.iso.18013.5.1']['a']['b']"],
    )
    def test_mdoc_requires_namespace_and_element(self, path):
        assert simplify_path(path, ClaimFormat.MSO_MDOC) is None

    def test_filter_key_hides_path(self):
        assert simplify_path("$.vct", filter_keys=["vct"]) is None
        assert simplify_path("$.given_name", filter_keys=["vct"]) == ["given_name"]

    @pytest.mark.parametrize("path", ["name", "$..name", "$[?(@.x)]"])
    def test_malformed_path_is_no_match(self, path):
        assert simplify_path(path) is None
