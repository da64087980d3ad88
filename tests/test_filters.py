import pytest

from djemini.providers.youtube.filters import (
    clean_artist_name,
    extract_artist,
    is_non_music,
    non_music_reason,
    normalize_title,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Hello    World ", "Hello World"),
        ("", "Unknown"),
        (None, "Unknown"),
        ("   ", "Unknown"),
    ],
)
def test_normalize_title(raw, expected):
    assert normalize_title(raw) == expected


def test_topic_suffix_is_stripped():
    assert clean_artist_name("Daft Punk - Topic") == "Daft Punk"
    assert clean_artist_name("Daft Punk") == "Daft Punk"
    assert clean_artist_name("") is None
    assert clean_artist_name(None) is None


def test_dash_split():
    assert extract_artist("Artist - Song", "Some Channel") == ("Artist", "Song")


def test_split_at_first_occurrence_only():
    assert extract_artist("A - B - C") == ("A", "B - C")


def test_separator_priority_beats_position():
    # " - " outranks ": " even though the colon comes first
    assert extract_artist("Intro: Part - Two") == ("Intro: Part", "Two")


def test_publisher_fallback_without_separator():
    assert extract_artist("Just A Song", "Singer - Topic") == ("Singer", "Just A Song")


def test_no_separator_no_publisher():
    assert extract_artist("Just A Song", None) == (None, "Just A Song")


def test_empty_head_tries_next_separator():
    assert extract_artist(" - Song | Live", "Chan") == ("- Song", "Live")


def test_non_music_matches_title_or_publisher():
    assert is_non_music("My Podcast Episode 4")
    assert is_non_music("Episode 4", "Daily News Channel")
    assert non_music_reason("Track reaction video") == "reaction"
    assert not is_non_music("Bohemian Rhapsody", "Queen Official")
