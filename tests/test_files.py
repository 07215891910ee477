# ruff: noqa: ANN201, ANN001
import os
import stat

from templatehub.utils.files import copy_filtered, force_remove_tree, make_ignore


def test_ignore_matches_directories_anywhere_and_files_only_as_files(tmp_path):
    (tmp_path / ".git").mkdir()
    (tmp_path / "README").mkdir()
    (tmp_path / ".gitignore").write_text("")
    (tmp_path / "keep.txt").write_text("")

    ignore = make_ignore([".git"], [".gitignore", "README"])

    assert ignore(str(tmp_path), [".git", "README", ".gitignore", "keep.txt"]) == {".git", ".gitignore"}


def test_copy_filtered_merges_into_existing_destination(tmp_path):
    source = tmp_path / "source"
    (source / "sub").mkdir(parents=True)
    (source / "sub" / "file.txt").write_text("new")
    (source / ".gitattributes").write_text("")
    destination = tmp_path / "destination"
    destination.mkdir()
    (destination / "other.txt").write_text("kept")

    copy_filtered(source, destination, excluded_files=[".gitattributes"])

    assert (destination / "sub" / "file.txt").read_text() == "new"
    assert (destination / "other.txt").read_text() == "kept"
    assert not (destination / ".gitattributes").exists()


def test_force_remove_tree_handles_read_only_entries(tmp_path):
    root = tmp_path / "cache"
    objects = root / ".git" / "objects" / "ab"
    objects.mkdir(parents=True)
    blob = objects / "cdef"
    blob.write_text("blob")
    os.chmod(blob, stat.S_IREAD)
    os.chmod(objects, stat.S_IREAD | stat.S_IEXEC)

    force_remove_tree(root)

    assert not root.exists()


def test_force_remove_tree_ignores_missing_directory(tmp_path):
    force_remove_tree(tmp_path / "missing")

    assert tmp_path.exists()


def test_force_remove_tree_does_not_follow_symlinks(tmp_path):
    target = tmp_path / "target"
    target.mkdir()
    (target / "precious.txt").write_text("keep")
    root = tmp_path / "root"
    root.mkdir()
    (root / "link").symlink_to(target, target_is_directory=True)

    force_remove_tree(root)

    assert not root.exists()
    assert (target / "precious.txt").read_text() == "keep"


def test_copy_filtered_keeps_symlinks_as_links(tmp_path):
    outside = tmp_path / "outside.txt"
    outside.write_text("host file")
    source = tmp_path / "source"
    source.mkdir()
    (source / "escape").symlink_to(outside)
    (source / "dangling").symlink_to(tmp_path / "missing")
    (source / "real.txt").write_text("real")
    destination = tmp_path / "destination"

    copy_filtered(source, destination)

    assert (destination / "real.txt").read_text() == "real"
    assert (destination / "escape").is_symlink()
    assert os.readlink(destination / "escape") == str(outside)
    assert (destination / "dangling").is_symlink()

    force_remove_tree(destination)
    assert outside.read_text() == "host file"
