"""Tests for path <-> inode resolution."""

import errno

import pytest

from metaclient.errors import NotADirectory, NotFound
from metaclient.models import ROOT_INODE_ID
from metaclient.path_resolver import normalize_path


class TestPathToInode:

    @pytest.mark.parametrize("path", ["/", "", "//"])
    def test_root_needs_no_remote_call(self, checker, cluster, path):
        assert checker.path_to_inode(1, path) == ROOT_INODE_ID
        assert sum(cluster.calls.values()) == 0

    @pytest.mark.parametrize("path,inode_id", [
        ("/a", 2),
        ("/a/c", 4),
        ("a/c/", 4),
        ("//a///c", 4),
        ("/d", 100),
    ])
    def test_directory_paths(self, checker, path, inode_id):
        assert checker.path_to_inode(1, path) == inode_id

    def test_one_lookup_per_segment(self, checker, cluster):
        checker.path_to_inode(1, "/a/c")
        assert cluster.calls["GetDentry"] == 2

    def test_file_segment_is_not_a_directory(self, checker):
        with pytest.raises(NotADirectory, match="b.txt"):
            checker.path_to_inode(1, "/a/b.txt")

    def test_file_as_intermediate_segment(self, checker):
        with pytest.raises(NotADirectory):
            checker.paths.path_to_inode(1, "/a/b.txt/x", expect_dir=False)

    def test_file_leaf_allowed_when_not_expecting_dir(self, checker):
        assert checker.paths.path_to_inode(1, "/a/b.txt", expect_dir=False) == 3

    def test_missing_segment(self, checker):
        with pytest.raises(NotFound):
            checker.path_to_inode(1, "/a/missing/c")

    def test_not_found_maps_to_enoent(self, checker):
        with pytest.raises(NotFound) as excinfo:
            checker.path_to_inode(1, "/zzz")
        assert excinfo.value.errno == errno.ENOENT


class TestInodeToPath:

    def test_root(self, checker, cluster):
        assert checker.inode_to_path(1, ROOT_INODE_ID) == "/"
        assert sum(cluster.calls.values()) == 0

    @pytest.mark.parametrize("inode_id,path", [(2, "/a"), (4, "/a/c"), (3, "/a/b.txt"), (101, "/d/e.bin")])
    def test_absolute_path(self, checker, inode_id, path):
        assert checker.inode_to_path(1, inode_id) == path

    @pytest.mark.parametrize("path", ["/a", "/a/c", "a//c/", "/d"])
    def test_round_trip(self, checker, path):
        inode_id = checker.path_to_inode(1, path)
        assert checker.inode_to_path(1, inode_id) == normalize_path(path)

    def test_deleted_while_walking_gives_empty_path(self, checker, cluster):
        cluster.remove_entry(2, "c")
        assert checker.inode_to_path(1, 4) == ""

    def test_deleted_ancestor_gives_empty_path(self, checker, cluster):
        cluster.remove_entry(1, "a")
        assert checker.inode_to_path(1, 4) == ""

    def test_hard_link_follows_first_parent(self, checker, cluster):
        cluster.children[100]["b-link"] = 3
        cluster.inodes[3]["parent"] = [100, 2]
        assert checker.inode_to_path(1, 3) == "/d/b-link"

    def test_absent_inode(self, checker):
        with pytest.raises(NotFound):
            checker.inode_to_path(1, 77)


class TestNormalizePath:

    @pytest.mark.parametrize("raw,expected", [
        ("", "/"), ("/", "/"), ("a", "/a"), ("/a/", "/a"), ("//a//b//", "/a/b"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_path(raw) == expected
