import pytest

from src.services.routing import (
    MISSING_KEY,
    MISSING_KEYS,
    Mode,
    RouteError,
    parse_batch_keys,
    parse_mode,
    resolve,
    split_raw_path,
)


@pytest.mark.parametrize("segment", ["badge", "badgen", "shields", "stats", "stats-batch"])
def test_parse_mode_known_segments(segment):
    assert parse_mode(segment) is Mode(segment)


@pytest.mark.parametrize("segment", ["", "unknown", "Badge", "stats_batch"])
def test_parse_mode_unknown_segments(segment):
    assert parse_mode(segment) is None


def test_only_counting_modes_increment():
    assert {m for m in Mode if m.increments} == {Mode.BADGE, Mode.BADGEN, Mode.SHIELDS}


def test_resolve_takes_second_segment_as_key():
    req = resolve("badge", "home")
    assert req.mode is Mode.BADGE
    assert req.key == "home"


def test_resolve_ignores_deeper_segments():
    assert resolve("stats", "home/extra/parts").keys == ["home"]


@pytest.mark.parametrize("rest", ["", "/anything"])
def test_resolve_missing_key_is_400(rest):
    with pytest.raises(RouteError) as exc:
        resolve("badge", rest)
    assert exc.value.status_code == 400
    assert exc.value.message == MISSING_KEY


def test_resolve_unknown_mode_is_404():
    with pytest.raises(RouteError) as exc:
        resolve("unknown", "x")
    assert exc.value.status_code == 404


def test_batch_keys_are_trimmed_and_ordered():
    assert parse_batch_keys(" a, b ,c") == ["a", "b", "c"]


@pytest.mark.parametrize("raw", [None, ""])
def test_batch_keys_missing_is_400(raw):
    with pytest.raises(RouteError) as exc:
        parse_batch_keys(raw)
    assert exc.value.status_code == 400
    assert "Missing keys query parameter" in exc.value.message
    assert exc.value.message == MISSING_KEYS


def test_resolve_batch_ignores_path():
    req = resolve("stats-batch", "ignored/path", "a,b")
    assert req.mode is Mode.STATS_BATCH
    assert req.keys == ["a", "b"]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("/stats/a%2Fb", ("stats", "a%2Fb")),
        ("/badge/my%20repo/extra", ("badge", "my%20repo/extra")),
        ("/badge", ("badge", "")),
        ("/badge/", ("badge", "")),
        ("/", ("", "")),
        ("", ("", "")),
    ],
)
def test_split_raw_path_keeps_percent_encoding(raw, expected):
    assert split_raw_path(raw) == expected
