"""Tests for RequestTemplate expansion, encoding and copy semantics."""

import pytest

from reqline.core.request import HttpMethod
from reqline.core.template import CollectionFormat, RequestTemplate, pct_encode


def make(uri, method=HttpMethod.GET, base="http://api.test"):
    template = RequestTemplate()
    template.method = method
    template.uri(uri)
    template.target(base)
    return template


def test_path_and_query_variables_are_expanded_and_encoded():
    """Path values are percent-encoded; query placeholders are substituted."""
    skeleton = make("/users/{id}/repos?sort={sort}")
    resolved = RequestTemplate.from_template(skeleton).resolve({"id": "a b", "sort": "name"})
    assert resolved.url() == "http://api.test/users/a%20b/repos?sort=name"


def test_resolving_a_copy_leaves_the_skeleton_untouched():
    skeleton = make("/users/{id}?sort={sort}")
    skeleton.header("X-Id", "{id}")
    RequestTemplate.from_template(skeleton).resolve({"id": "7", "sort": "asc"})
    assert skeleton.path == "/users/{id}"
    assert skeleton.queries() == {"sort": ["{sort}"]}
    assert skeleton.headers() == {"X-Id": ["{id}"]}
    assert skeleton.resolved is False


def test_unresolved_query_parameter_is_dropped():
    resolved = make("/search?q={q}&page={page}").resolve({"q": "x"})
    assert resolved.url() == "http://api.test/search?q=x"


def test_literal_query_parameter_survives_resolution():
    resolved = make("/search?flag&limit=10").resolve({})
    assert resolved.url() == "http://api.test/search?flag&limit=10"


@pytest.mark.parametrize(
    "collection_format, expected",
    [
        (CollectionFormat.EXPLODED, "tag=a&tag=b"),
        (CollectionFormat.CSV, "tag=a,b"),
        (CollectionFormat.SSV, "tag=a%20b"),
        (CollectionFormat.PIPES, "tag=a%7Cb"),
    ],
)
def test_list_values_follow_collection_format(collection_format, expected):
    template = make("/items?tag={tag}")
    template.collection_format = collection_format
    assert template.resolve({"tag": ["a", "b"]}).query_line() == expected


def test_query_line_skips_none_markers_and_emits_bare_names():
    template = RequestTemplate()
    template.query("a", ["1", None, "2"])
    template.query("flag", [None])
    assert template.query_line() == "a=1&a=2&flag"


def test_query_replaces_and_empty_list_removes():
    template = make("/x?a=1&b=2")
    template.query("a", ["3", "4"])
    template.query("b", [])
    assert template.queries() == {"a": ["3", "4"]}


def test_query_name_matches_its_percent_encoded_form():
    template = make("/x?filter[a]=1&page=2")
    template.query("filter%5Ba%5D", ["3"])
    assert template.queries() == {"filter%5Ba%5D": ["3"], "page": ["2"]}
    template.query("filter[a]", [])
    assert template.queries() == {"page": ["2"]}


def test_header_names_are_case_insensitive():
    template = RequestTemplate()
    template.header("Accept", "text/plain")
    template.header("accept", "application/json")
    template.add_header("ACCEPT", ["text/html"])
    assert template.headers() == {"accept": ["application/json", "text/html"]}
    assert template.header_values("Accept") == ["application/json", "text/html"]


def test_header_with_unresolved_placeholder_is_dropped():
    template = make("/x")
    template.header("X-Token", "{token}")
    template.header("X-Ids", "{ids}")
    template.resolve({"ids": ["1", "2"]})
    assert template.headers() == {"X-Ids": ["1", "2"]}


def test_header_values_are_not_percent_encoded():
    template = make("/x")
    template.header("X-Name", "{name}")
    assert template.resolve({"name": "a b/c"}).header_values("X-Name") == ["a b/c"]


def test_body_template_is_expanded_without_encoding():
    template = make("/users", HttpMethod.POST)
    template.body_template('{"name": "{name}"}')
    template.resolve({"name": "a b"})
    assert template.body_bytes == b'{"name": "a b"}'
    assert template.body_template_text is None


def test_decode_slash_controls_slash_encoding():
    kept = make("/files/{path}").resolve({"path": "a/b"})
    assert kept.path == "/files/a/b"

    encoded = make("/files/{path}")
    encoded.decode_slash = False
    assert encoded.resolve({"path": "a/b"}).path == "/files/a%2Fb"


def test_target_query_is_merged_and_trailing_slash_stripped():
    template = make("/x", base="https://h.test/api/?key=1").resolve({})
    assert template.url() == "https://h.test/api/x?key=1"


def test_variables_lists_every_placeholder_once():
    template = make("/users/{id}?q={q}")
    template.header("X-Id", "{id}")
    template.body_template("{payload}")
    assert template.variables() == ["id", "q", "payload"]
    assert template.has_request_variable("payload")
    assert not template.has_request_variable("other")


def test_request_requires_resolution():
    template = make("/x")
    with pytest.raises(RuntimeError):
        template.request()
    request = template.resolve({}).request()
    assert request.method is HttpMethod.GET
    assert request.url == "http://api.test/x"


def test_pct_encode_keeps_only_unreserved_characters():
    assert pct_encode("a b/c?d=e~f") == "a%20b%2Fc%3Fd%3De~f"
