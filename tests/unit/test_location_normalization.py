"""
Unit tests for repository location normalization.
"""
import pytest

from targetplatform.repository.base import ENABLED, NONE, Reference, RepositoryKind, normalize_location


class TestNormalizeLocation:
    """Test canonicalization of repository locations."""
    
    def test_scheme_and_host_lowercased(self):
        """Should lowercase scheme and host but keep path case."""
        assert normalize_location("HTTPS://Download.Example.ORG/Releases") == "https://download.example.org/Releases"
    
    def test_trailing_slash_removed(self):
        """Trailing slash variants should compare equal."""
        assert normalize_location("https://example.org/repo/") == normalize_location("https://example.org/repo")
    
    def test_dot_segments_collapsed(self):
        """Should collapse '.' and '..' segments."""
        assert normalize_location("https://example.org/a/./b/../c") == "https://example.org/a/c"
    
    def test_duplicate_slashes_collapsed(self):
        """Should collapse empty path segments."""
        assert normalize_location("https://example.org//a///b") == "https://example.org/a/b"
    
    def test_bare_host_root(self):
        """Host with and without root slash should compare equal."""
        assert normalize_location("repo://A/") == normalize_location("repo://a")
    
    def test_file_uri_keeps_absolute_path(self):
        """Should keep file URIs absolute."""
        assert normalize_location("file:///tmp/repos/one/") == "file:///tmp/repos/one"
    
    def test_absolute_path_matches_file_uri(self):
        """Should map bare absolute paths to their file URI."""
        assert normalize_location("/tmp/repo") == normalize_location("file:///tmp/repo/")
        assert normalize_location("/tmp/repo") == "file:///tmp/repo"
    
    def test_userinfo_case_preserved(self):
        """Should only lowercase the host part of the authority."""
        assert normalize_location("https://User@Example.org/r") == "https://User@example.org/r"
    
    def test_query_preserved(self):
        """Should keep the query string."""
        assert normalize_location("https://example.org/r?Version=2") == "https://example.org/r?Version=2"
    
    def test_surrounding_whitespace_ignored(self):
        """Should strip surrounding whitespace."""
        assert normalize_location("  https://example.org/r  ") == "https://example.org/r"


class TestReference:
    """Test reference kinds and enablement."""
    
    def test_enabled_bit_set(self):
        reference = Reference("https://example.org/r", RepositoryKind.METADATA, ENABLED)
        assert reference.is_enabled is True
    
    def test_enabled_bit_cleared(self):
        reference = Reference("https://example.org/r", RepositoryKind.METADATA, NONE)
        assert reference.is_enabled is False
    
    @pytest.mark.parametrize("options,expected", [(ENABLED | 4, True), (2, False), (6, False), (7, True)])
    def test_other_bits_ignored(self, options, expected):
        """Only the enabled bit decides whether a reference is active."""
        reference = Reference("https://example.org/r", RepositoryKind.ARTIFACT, options)
        assert reference.is_enabled is expected
    
    def test_string_kind_coerced(self):
        reference = Reference("https://example.org/r", "artifact")
        assert reference.kind is RepositoryKind.ARTIFACT
    
    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Reference("https://example.org/r", "mirror")
