"""Tests for ref candidate resolution."""
from pkgpin.fetch.resolver import candidate_refs


def test_subdirectory_prefixed_ref_tried_first():
    """Test: monorepo tags are tried before the plain ref.

    Given: subdirectory "foo" and ref "v1"
    When: candidate_refs is called
    Then: ["foo/v1", "v1"] in that order
    """
    assert candidate_refs("foo", "v1") == ["foo/v1", "v1"]


def test_root_directory_uses_ref_only():
    assert candidate_refs("", "v1") == ["v1"]


def test_leading_slash_stripped_from_directory():
    assert candidate_refs("/apps/web", "v1.0.0") == ["apps/web/v1.0.0", "v1.0.0"]


def test_fully_qualified_ref_not_prefixed():
    """Test: refs/... are used as-is even with a subdirectory."""
    assert candidate_refs("foo", "refs/tags/v1") == ["refs/tags/v1"]
    assert candidate_refs("foo", "refs/heads/main") == ["refs/heads/main"]


def test_slash_only_directory_collapses_to_single_candidate():
    assert candidate_refs("/", "main") == ["main"]
