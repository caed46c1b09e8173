"""
Property-based tests for the template substitution helpers.

Properties:
- Identity: an empty substitution list leaves the text unchanged
- Absent token: a token that does not occur is a no-op
- Global replace: every occurrence of a token is replaced
- Order: substitutions are applied one after the other
"""

import pytest
from hypothesis import given, strategies as st

from wordpress_ec2_rds.utils import load_template, replace_all_substrings

TOKEN = "_TOKEN_"

plain_text = st.text(alphabet="abc ", max_size=30)


@given(text=st.text())
def test_empty_substitution_list_returns_text_unchanged(text):
    assert replace_all_substrings([], text) == text


@given(text=plain_text, value=st.text(max_size=10))
def test_absent_token_is_a_no_op(text, value):
    assert replace_all_substrings([{TOKEN: value}], text) == text


@given(
    parts=st.lists(plain_text, min_size=2, max_size=8),
    value=st.text(alphabet="xyz", min_size=1, max_size=5),
)
def test_every_occurrence_is_replaced(parts, value):
    text = TOKEN.join(parts)
    occurrences = len(parts) - 1

    result = replace_all_substrings([{TOKEN: value}], text)

    assert TOKEN not in result
    assert result.count(value) == occurrences


def test_substitutions_are_applied_in_sequence():
    assert replace_all_substrings([{"A": "B"}, {"B": "C"}], "A") == "C"


def test_later_substitutions_see_earlier_output():
    text = "The woman and man and woman and man"
    words = [{"man": "boy"}, {"woman": "girl"}]

    assert replace_all_substrings(words, text) == "The woboy and boy and woboy and boy"
    assert replace_all_substrings(list(reversed(words)), text) == "The girl and boy and girl and boy"


def test_empty_mapping_entries_are_skipped():
    assert replace_all_substrings([{}, {"a": "b"}], "aa") == "bb"


def test_only_first_key_of_an_entry_is_used():
    assert replace_all_substrings([{"a": "1", "b": "2"}], "ab") == "1b"


def test_tokens_match_literally_by_default():
    assert replace_all_substrings([{"a.c": "X"}], "abc a.c") == "abc X"


def test_pattern_matching_is_opt_in():
    assert replace_all_substrings([{"a.c": "X"}], "abc a.c", regex=True) == "X X"


def test_pattern_replacement_is_inserted_verbatim():
    assert replace_all_substrings([{"(b)": r"\1$&"}], "abc", regex=True) == r"a\1$&c"


def test_load_template_reads_utf8(tmp_path):
    path = tmp_path / "template.sh"
    path.write_text("title=_WP_SITE_TITLE_ ✓\n", encoding="utf-8")

    assert load_template(path) == "title=_WP_SITE_TITLE_ ✓\n"


def test_load_template_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_template(tmp_path / "missing.sh")


def test_malformed_pattern_is_skipped():
    assert replace_all_substrings([{"(": "x"}], "a(b", regex=True) == "a(b"


def test_malformed_pattern_does_not_stop_later_entries():
    words = [{"[": "x"}, {"b": "c"}]
    assert replace_all_substrings(words, "a[b", regex=True) == "a[c"


@pytest.mark.parametrize("words, text", [
    (["consectetur blanditiis rerum"], "foo bar"),
    (["perferendis aut voluptatibus", "in et tempore", "illo qui omnis"], "foo bar"),
    (["in et tempore"], "Hello, world!"),
    ([], ""),
])
def test_entries_that_are_not_mappings_are_skipped(words, text):
    assert replace_all_substrings(words, text) == text
