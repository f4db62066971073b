"""Tests for command rewrite hooks."""

from cmdpool.core import identity_rewrite, prefix_rewrite


def test_prefix_and_sub_path_are_joined_with_single_spaces():
    """Rewritten text is '<prefix> <sub_path> <command>'."""
    rewrite = prefix_rewrite("/usr/bin/python3", "bin/console")
    expected = "/usr/bin/python3 bin/console cache:clear --env=prod"
    assert rewrite("cache:clear --env=prod") == expected


def test_empty_sub_path_is_skipped():
    """A missing sub-path does not leave a double space."""
    rewrite = prefix_rewrite("nice", "")
    assert rewrite("make") == "nice make"


def test_no_prefix_leaves_command_unchanged():
    """With neither part set the command is returned as-is."""
    rewrite = prefix_rewrite(None, None)
    assert rewrite("make all") == "make all"


def test_rewrite_is_pure():
    """Applying a hook twice to the same input gives the same result."""
    rewrite = prefix_rewrite("php", "app.php")
    assert rewrite("job") == rewrite("job") == "php app.php job"


def test_identity_rewrite():
    """identity_rewrite returns its input."""
    assert identity_rewrite("echo hi") == "echo hi"
