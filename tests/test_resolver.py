"""
Tests for expanding and shortening file links.

Filesystem cases use real temporary directories; cross-platform cases force
the Windows convention and replace the existence check.
"""

import pytest
from unittest.mock import patch

from bibpath_mcp.config import Config, FileDirectoryConfig
from bibpath_mcp.conventions import POSIX, WINDOWS
from bibpath_mcp.tools.entries import BibEntry
from bibpath_mcp.tools.resolver import (
    candidate_directories,
    expand_file,
    expand_filename,
    expand_with_metadata,
    get_list_of_linked_files,
    list_linked_files,
    shorten_file,
    shorten_filename,
    sort_longest_first,
)


@pytest.fixture
def library(tmp_path, monkeypatch):
    """A file directory with one paper, and a cwd that holds nothing."""
    lib = tmp_path / "lib"
    (lib / "sub").mkdir(parents=True)
    (lib / "ref.pdf").write_bytes(b"%PDF")
    (lib / "sub" / "nested.pdf").write_bytes(b"%PDF")
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return lib


class TestExpandFilename:
    """Tests for expand_filename."""

    def test_empty_name(self, library):
        assert expand_filename("", [str(library)], POSIX) is None
        assert expand_filename(None, [str(library)], POSIX) is None

    def test_existing_path_returned_unchanged(self, library):
        absolute = str(library / "ref.pdf")
        assert expand_filename(absolute, ["/does/not/matter"], POSIX) == absolute

    def test_expands_relative_name(self, library):
        assert expand_filename("ref.pdf", [str(library)], POSIX) == str(library / "ref.pdf")

    def test_skips_none_and_missing_directories(self, library, tmp_path):
        directories = [None, str(tmp_path / "missing"), str(library)]
        assert expand_filename("ref.pdf", directories, POSIX) == str(library / "ref.pdf")

    def test_first_directory_wins(self, library, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "ref.pdf").write_bytes(b"%PDF")
        assert expand_filename("ref.pdf", [str(other), str(library)], POSIX) == str(other / "ref.pdf")

    def test_no_doubled_separator(self, library):
        assert expand_filename("ref.pdf", [str(library) + "/"], POSIX) == str(library / "ref.pdf")

    def test_normalizes_backslashes(self, library):
        assert expand_filename("sub\\nested.pdf", [str(library)], POSIX) == str(library / "sub" / "nested.pdf")

    def test_not_found(self, library):
        assert expand_filename("absent.pdf", [str(library)], POSIX) is None
        assert expand_filename("ref.pdf", [], POSIX) is None

    def test_windows_convention(self):
        existing = {"C:\\lit\\papers\\ref.pdf"}
        result = expand_filename("papers/ref.pdf", ["D:\\none", "C:\\lit"], WINDOWS, exists=existing.__contains__)
        assert result == "C:\\lit\\papers\\ref.pdf"

    def test_windows_directory_with_trailing_separator(self):
        existing = {"C:\\lit\\ref.pdf"}
        result = expand_filename("ref.pdf", ["C:\\lit\\"], WINDOWS, exists=existing.__contains__)
        assert result == "C:\\lit\\ref.pdf"


class TestCandidateDirectories:
    """Tests for assembling the ordered directory list."""

    def test_order_and_deduplication(self):
        directories = FileDirectoryConfig(
            file_directories=["/lit", "/pdfs", "/lit"],
            extension_directories={"pdf": ["/pdfs", "/scans"]},
            database_directory="/lit",
        )
        assert candidate_directories(directories, "pdf") == ["/pdfs", "/scans", "/lit"]

    def test_without_extension(self):
        directories = FileDirectoryConfig(
            file_directories=["/lit"],
            extension_directories={"pdf": ["/pdfs"]},
            database_directory="/bib",
        )
        assert candidate_directories(directories) == ["/lit", "/bib"]

    def test_extension_lookup_is_lower_case(self):
        directories = FileDirectoryConfig(extension_directories={"pdf": ["/pdfs"]})
        assert candidate_directories(directories, "PDF") == ["/pdfs"]

    def test_expand_with_metadata(self, library, tmp_path):
        directories = FileDirectoryConfig(
            file_directories=[str(tmp_path / "empty")],
            extension_directories={"pdf": [str(library)]},
        )
        assert expand_with_metadata("ref.pdf", directories, POSIX) == str(library / "ref.pdf")
        assert expand_with_metadata("", directories, POSIX) is None


class TestShortenFilename:
    """Tests for shorten_filename."""

    def test_unchanged_when_no_directory_matches(self):
        assert shorten_filename("/a/b/c.pdf", ["/x/y"], POSIX) == "/a/b/c.pdf"

    def test_shortens_against_directory(self):
        assert shorten_filename("/home/me/lit/2020/a.pdf", ["/home/me/lit"], POSIX) == "2020/a.pdf"

    def test_directory_with_trailing_separator(self):
        assert shorten_filename("/home/me/lit/a.pdf", ["/home/me/lit/"], POSIX) == "a.pdf"

    def test_prefix_must_end_at_separator(self):
        assert shorten_filename("/home/me/literature/a.pdf", ["/home/me/lit"], POSIX) == "/home/me/literature/a.pdf"

    def test_relative_and_empty_unchanged(self):
        assert shorten_filename("lit/a.pdf", ["lit"], POSIX) == "lit/a.pdf"
        assert shorten_filename("", ["/lit"], POSIX) == ""
        assert shorten_filename(None, ["/lit"], POSIX) is None

    def test_none_directories(self):
        assert shorten_filename("/lit/a.pdf", None, POSIX) == "/lit/a.pdf"
        assert shorten_filename("/lit/a.pdf", [None, "/lit"], POSIX) == "a.pdf"

    def test_first_matching_directory_wins(self):
        directories = ["/home/me/lit/important", "/home/me/lit"]
        assert shorten_filename("/home/me/lit/important/a.pdf", directories, POSIX) == "a.pdf"
        # parent first: the nested directory is never reached
        assert shorten_filename("/home/me/lit/important/a.pdf", directories[::-1], POSIX) == "important/a.pdf"

    def test_posix_is_case_sensitive(self):
        assert shorten_filename("/Home/lit/a.pdf", ["/home/lit"], POSIX) == "/Home/lit/a.pdf"

    def test_windows_is_case_insensitive_and_keeps_case(self):
        result = shorten_filename("C:\\Users\\Me\\Lit\\Smith2020.PDF", ["c:\\users\\me\\lit"], WINDOWS)
        assert result == "Smith2020.PDF"

    def test_windows_relative_unchanged(self):
        assert shorten_filename("Lit\\a.pdf", ["Lit"], WINDOWS) == "Lit\\a.pdf"

    def test_windows_rooted_path_without_drive_unchanged(self):
        assert shorten_filename("\\lit\\a.pdf", ["\\lit"], WINDOWS) == "\\lit\\a.pdf"

    def test_windows_drive_relative_path_unchanged(self):
        assert shorten_filename("C:a.pdf", ["C:"], WINDOWS) == "C:a.pdf"

    def test_windows_unc_path(self):
        assert shorten_filename("\\\\server\\lit\\a.pdf", ["\\\\server\\lit"], WINDOWS) == "a.pdf"

    def test_windows_absolute_detection(self):
        assert WINDOWS.is_absolute("C:\\lit\\a.pdf")
        assert WINDOWS.is_absolute("c:/lit/a.pdf")
        assert WINDOWS.is_absolute("\\\\server\\share")
        assert not WINDOWS.is_absolute("\\lit\\a.pdf")
        assert not WINDOWS.is_absolute("C:a.pdf")
        assert not WINDOWS.is_absolute("C:")
        assert not WINDOWS.is_absolute("lit\\a.pdf")

    def test_sort_longest_first(self):
        assert sort_longest_first(["/lit", None, "/lit/important", "/a"]) == ["/lit/important", "/lit", "/a"]


class TestRoundTrip:
    """Expanding a shortened path gives the original path back."""

    def test_round_trip(self, library):
        original = str(library / "sub" / "nested.pdf")
        shortened = shorten_filename(original, [str(library)], POSIX)
        assert shortened == "sub/nested.pdf"
        assert expand_filename(shortened, [str(library)], POSIX) == original

    def test_round_trip_windows(self):
        original = "C:\\lit\\sub\\a.pdf"
        shortened = shorten_filename(original, ["C:\\lit"], WINDOWS)
        assert expand_filename(shortened, ["C:\\lit"], WINDOWS, exists={original}.__contains__) == original


class TestLinkedFiles:
    """Tests for get_list_of_linked_files."""

    def test_resolves_links_in_order(self, library):
        entries = [
            BibEntry("smith2020", {"file": ":ref.pdf:PDF;:missing.pdf:PDF"}),
            BibEntry("jones2021", {"file": "Nested:sub/nested.pdf:PDF"}),
            BibEntry("nofile"),
        ]
        result = get_list_of_linked_files(entries, [str(library)], POSIX)
        assert result == [str(library / "ref.pdf"), str(library / "sub" / "nested.pdf")]

    def test_no_entries(self, library):
        assert get_list_of_linked_files([], [str(library)], POSIX) == []


class TestResolverTools:
    """Tests for expand_file, shorten_file and list_linked_files tools."""

    @pytest.mark.asyncio
    async def test_expand_file_with_directories(self, library):
        with patch('bibpath_mcp.tools.resolver.config_manager') as mock_config:
            mock_config.load.return_value = Config(paths={'convention': 'posix'})
            result = await expand_file("ref.pdf", [str(library)])

        assert result['success'] is True
        assert result['found'] is True
        assert result['path'] == str(library / "ref.pdf")

    @pytest.mark.asyncio
    async def test_expand_file_uses_configured_directories(self, library):
        with patch('bibpath_mcp.tools.resolver.config_manager') as mock_config:
            mock_config.load.return_value = Config(
                directories=FileDirectoryConfig(extension_directories={"pdf": [str(library)]}),
                paths={'convention': 'posix'},
            )
            result = await expand_file("ref.pdf")

        assert result['path'] == str(library / "ref.pdf")

    @pytest.mark.asyncio
    async def test_expand_file_not_found(self, library):
        with patch('bibpath_mcp.tools.resolver.config_manager') as mock_config:
            mock_config.load.return_value = Config(paths={'convention': 'posix'})
            result = await expand_file("absent.pdf", [str(library)])

        assert result['success'] is True
        assert result['found'] is False
        assert result['path'] is None

    @pytest.mark.asyncio
    async def test_expand_file_empty_name(self):
        result = await expand_file("")
        assert result['success'] is False
        assert result['error']['code'] == 'INVALID_ARGUMENT'

    @pytest.mark.asyncio
    async def test_shorten_file_sorts_configured_directories(self):
        with patch('bibpath_mcp.tools.resolver.config_manager') as mock_config:
            mock_config.load.return_value = Config(
                directories=FileDirectoryConfig(file_directories=["/lit", "/lit/important"]),
                paths={'convention': 'posix'},
            )
            result = await shorten_file("/lit/important/a.pdf")

        assert result['success'] is True
        assert result['shortened'] == "a.pdf"
        assert result['changed'] is True

    @pytest.mark.asyncio
    async def test_shorten_file_unchanged(self):
        with patch('bibpath_mcp.tools.resolver.config_manager') as mock_config:
            mock_config.load.return_value = Config(paths={'convention': 'posix'})
            result = await shorten_file("/a/b/c.pdf", ["/x/y"])

        assert result['shortened'] == "/a/b/c.pdf"
        assert result['changed'] is False

    @pytest.mark.asyncio
    async def test_list_linked_files(self, library):
        with patch('bibpath_mcp.tools.resolver.config_manager') as mock_config:
            mock_config.load.return_value = Config(
                directories=FileDirectoryConfig(file_directories=[str(library)]),
                paths={'convention': 'posix'},
            )
            result = await list_linked_files([
                {'citation_key': 'smith2020', 'fields': {'file': ':ref.pdf:PDF'}},
                {'key': 'jones2021', 'file': ':sub/nested.pdf:PDF'},
            ])

        assert result['success'] is True
        assert result['count'] == 2
        assert result['files'] == [str(library / "ref.pdf"), str(library / "sub" / "nested.pdf")]

    @pytest.mark.asyncio
    async def test_list_linked_files_invalid(self):
        result = await list_linked_files("not a list")
        assert result['success'] is False
        assert result['error']['code'] == 'INVALID_ARGUMENT'

    @pytest.mark.asyncio
    async def test_list_linked_files_directories_must_be_list(self):
        result = await list_linked_files([{'citation_key': 'a'}], "/lit")
        assert result['error']['code'] == 'INVALID_ARGUMENT'

    @pytest.mark.asyncio
    async def test_expand_file_directories_must_be_list(self):
        result = await expand_file("ref.pdf", "/lit")
        assert result['success'] is False
        assert result['error']['code'] == 'INVALID_ARGUMENT'

        result = await expand_file("ref.pdf", ["/lit", 3])
        assert result['error']['code'] == 'INVALID_ARGUMENT'

    @pytest.mark.asyncio
    async def test_expand_file_name_must_be_string(self):
        result = await expand_file(5)
        assert result['error']['code'] == 'INVALID_ARGUMENT'

    @pytest.mark.asyncio
    async def test_shorten_file_directories_must_be_list(self):
        # a bare string would otherwise be read as the directories "/" and "x"
        result = await shorten_file("/lit/a.pdf", "/x")
        assert result['success'] is False
        assert result['error']['code'] == 'INVALID_ARGUMENT'

        result = await shorten_file("/lit/a.pdf", [None])
        assert result['error']['code'] == 'INVALID_ARGUMENT'
