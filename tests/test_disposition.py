import re

import pytest

from app.core.disposition import (
    Disposition,
    check_commit_author,
    classify_commit_message,
    is_automation_bot_author,
)

BOT_RE = re.compile(r"^noreply\+([-\w]+)@example.com$")


@pytest.mark.parametrize("message,expected", [
    ("Linked GitHub updates number\nUpdates #1", Disposition.LINKED),
    ("Linked GitHub updates URL\nUpdates https://github.com/acme/example/issues/1", Disposition.LINKED),
    ("Linked GitHub close number\nClose #1", Disposition.LINKED),
    ("Linked GitHub closes number\nCloses #1", Disposition.LINKED),
    ("Linked GitHub closed number\nClosed #1", Disposition.LINKED),
    ("Linked GitHub fix number\nFix #1", Disposition.LINKED),
    ("Linked GitHub fixes number\nFixes #1", Disposition.LINKED),
    ("Linked GitHub fixed number\nFixed #1", Disposition.LINKED),
    ("Linked GitHub resolve number\nResolve #1", Disposition.LINKED),
    ("Linked GitHub resolves number\nResolves #1", Disposition.LINKED),
    ("Linked GitHub resolved number\nResolved #1", Disposition.LINKED),
    ("Linked GitHub for number\nFor #1", Disposition.LINKED),
    ("updates #42", Disposition.LINKED),
    ("Linked tracker number\nUpdates XXX-123", Disposition.FAILED),
    ("Revert 0123456789abcdef", Disposition.REVERT),
    ("Cleanup\nJust a #cleanup", Disposition.CLEANUP),
    ("Skipped\nskip-issuebot", Disposition.SKIPPED),
    ("Fixed the typo", Disposition.FAILED),
    ("", Disposition.FAILED),
])
def test_classify_commit_message(message, expected):
    assert classify_commit_message(message) == expected


def test_revert_wins_over_everything():
    message = "Revert \"add widget\"\n\nskip-issuebot #cleanup\nUpdates #9"
    assert classify_commit_message(message) == Disposition.REVERT


def test_revert_only_counts_on_first_line():
    assert classify_commit_message("Add widget\nRevert the thing") == Disposition.FAILED


def test_link_beats_manual_tags():
    assert classify_commit_message("skip-issuebot\n#cleanup\nFixes #3") == Disposition.LINKED


def test_skip_beats_cleanup():
    assert classify_commit_message("tidy #cleanup\nskip-issuebot") == Disposition.SKIPPED


def test_verb_must_start_the_line():
    assert classify_commit_message("This updates #5") == Disposition.FAILED


def test_disposition_order():
    assert list(Disposition) == sorted(Disposition)
    assert Disposition.FAILED < Disposition.SKIPPED < Disposition.CLEANUP < Disposition.SMALL_DIFF
    assert Disposition.SMALL_DIFF < Disposition.REVERT < Disposition.BOT < Disposition.LINKED
    assert not Disposition.FAILED.passed
    assert all(d.passed for d in Disposition if d != Disposition.FAILED)


@pytest.mark.parametrize("name,email,match", [
    # Basic invalid cases.
    (None, None, False),
    ("", None, False),
    (None, "", False),
    ("", "", False),
    ("Foo", None, False),
    (None, "noreply+foo@example.com", False),

    # E-mail is not noreply+suffix@example.com.
    ("Foo", "foo@bar.com", False),
    ("Foo", "foo@example.com", False),
    ("Foo", "noreply@example", False),
    ("Foo", "noreply@example.com", False),

    # E-mail suffix does not match the user name.
    ("Foo", "noreply+bar@example.com", False),
    ("Foo Bar", "noreply+baz-quux@example.com", False),
    ("Foo Bar", "noreply+foo_bar@example.com", False),
    ("Apple", "noreply+apples@example.com", False),

    # Suffix matches case-insensitively, whitespace converts to hyphens.
    ("Apple", "noreply+apple@example.com", True),
    ("Pear Plum", "noreply+pear-plum@example.com", True),
    ("Pear   Plum", "noreply+pear-plum@example.com", True),
    ("cherry", "noreply+CHERRY@example.com", True),
    ("OSS Updater", "noreply+oss-updater@example.com", True),
])
def test_is_automation_bot_author(name, email, match):
    assert is_automation_bot_author(name, email, BOT_RE) is match


def test_bot_author_without_pattern():
    assert is_automation_bot_author("Apple", "noreply+apple@example.com", None) is False


def test_bot_author_pattern_without_group():
    pattern = re.compile(r"@bots\.example\.com$")
    assert is_automation_bot_author("Anything", "builder@bots.example.com", pattern) is True
    assert is_automation_bot_author("Anything", "builder@example.com", pattern) is False


def test_check_commit_author_tagged_bot():
    name = "dependabot[bot]"
    email = "49699333+dependabot[bot]@users.noreply.github.com"
    assert check_commit_author(name, email, None) == Disposition.BOT


def test_check_commit_author_configured_bot():
    assert check_commit_author("OSS Updater", "noreply+oss-updater@example.com", BOT_RE) == Disposition.BOT
    assert check_commit_author("Jane Doe", "jane@example.com", BOT_RE) == Disposition.FAILED
    assert check_commit_author(None, None, BOT_RE) == Disposition.FAILED
