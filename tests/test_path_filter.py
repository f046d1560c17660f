"""
Unit tests for PathFilter: literal patterns, regular expressions, hidden folder names.
"""
import os
import re

from dupscan.core.models import ScanOptions
from dupscan.core.path_filter import PathFilter


def p(*parts):
    return os.sep + os.path.join(*parts)


class TestPathFilter:

    def test_no_rules_excludes_nothing(self):
        path_filter = PathFilter()
        assert not path_filter.should_exclude(p("home", "user", "file.txt"))

    def test_literal_pattern_matches_substring(self):
        path_filter = PathFilter(exclude_patterns=[".cache"])
        assert path_filter.should_exclude(p("home", "user", ".cache", "x.bin"))
        assert path_filter.should_exclude(p("home", "user", "my.cache.db"))
        assert not path_filter.should_exclude(p("home", "user", "cache", "x.bin"))

    def test_regex_pattern_uses_search(self):
        path_filter = PathFilter(exclude_patterns=[re.compile(r"\.tmp$")])
        assert path_filter.should_exclude(p("data", "a.tmp"))
        assert not path_filter.should_exclude(p("data", "a.tmp.keep"))

    def test_hidden_folder_matches_whole_segment_only(self):
        path_filter = PathFilter(hidden_folders={"node_modules"})
        assert path_filter.should_exclude(p("proj", "node_modules"))
        assert path_filter.should_exclude(p("proj", "node_modules", "pkg", "index.js"))
        assert not path_filter.should_exclude(p("proj", "my_node_modules_backup", "index.js"))

    def test_from_options_and_callable(self):
        options = ScanOptions.from_strings(exclude=["skipme"], exclude_regex=[r"\d{4}"], hidden_folders=[".git"])
        path_filter = PathFilter.from_options(options)
        assert path_filter(p("a", "skipme.txt"))
        assert path_filter(p("a", "photo_2024.jpg"))
        assert path_filter(p("repo", ".git", "HEAD"))
        assert not path_filter(p("repo", "src", "main.py"))
