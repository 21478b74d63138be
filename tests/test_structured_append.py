import pytest

from aztec_content import Content
from aztec_structured_append import has_structured_append_header, parse_structured_append
from tests.helpers import get_data, words5

ML_UL = [29, 29]


def test_no_header():
    result = get_data([2])
    assert result.structured_append.index == -1
    assert result.structured_append.count == -1
    assert result.structured_append.id == ""
    assert result.text() == "A"


@pytest.mark.parametrize("words,index,count", [
    # ISO/IEC 24778:2008 section 8 example: AD .. DD
    ([2, 5, 2], 0, 4),
    ([3, 5, 2], 1, 4),
    ([4, 5, 2], 2, 4),
    ([5, 5, 2], 3, 4),
    # sequencing field
    ([2, 27, 2], 0, 26),
    ([14, 27, 2], 12, 26),
    ([27, 27, 2], 25, 26),
])
def test_sequence(words, index, count):
    result = get_data(ML_UL + words)
    assert result.structured_append.index == index
    assert result.structured_append.count == count
    assert result.structured_append.id == ""
    assert result.text() == "A"


def test_id():
    result = get_data(ML_UL + [1, 10, 5, 1, 2, 5, 2])
    assert result.structured_append.id == "ID"
    assert result.structured_append.index == 0
    assert result.structured_append.count == 4
    assert result.text() == "A"


@pytest.mark.parametrize("words,index", [
    # count of one
    ([2, 2, 2], 0),
    # count not above index
    ([6, 5, 2], 4),
])
def test_invalid_count_is_unknown(words, index):
    result = get_data(ML_UL + words)
    assert result.structured_append.index == index
    assert result.structured_append.count == 0
    assert result.text() == "A"


@pytest.mark.parametrize("words,text", [
    # unterminated id
    ([1, 5, 2], " DA"),
    # lowercase index
    ([28, 5, 2], "da"),
    # space as count
    ([2, 1, 2], "A A"),
    # lowercase count
    ([2, 28, 2], "Aa"),
    # header with nothing after the sequence is too short
    ([2, 5], "AD"),
])
def test_malformed_prefix_is_kept(words, text):
    result = get_data(ML_UL + words)
    assert result.structured_append.index == -1
    assert result.structured_append.count == -1
    assert result.text() == text


@pytest.mark.parametrize("words,sa_id,index,count,text", [
    ([1, 10, 5, 2, 5, 2], "", -1, -1, " IDADA"),
    # empty id
    ([1, 1, 2, 5, 2], "", 0, 4, "A"),
    ([1, 10, 1, 5, 1, 2, 5, 2], "", -1, -1, " I D ADA"),
    ([1, 10, 1, 2, 5, 1, 2, 5, 2], "I", 0, 4, " ADA"),
])
def test_id_edge_cases(words, sa_id, index, count, text):
    result = get_data(ML_UL + words)
    assert result.structured_append.id == sa_id
    assert result.structured_append.index == index
    assert result.structured_append.count == count
    assert result.text() == text


def test_header_detection():
    assert has_structured_append_header(words5([29, 29, 2, 5, 2]))
    assert not has_structured_append_header(words5([29, 29, 2, 5]))
    assert not has_structured_append_header(words5([29, 28, 2, 5, 2]))


def test_parse_keeps_eci_positions_aligned():
    content = Content()
    content.append("AD")
    content.switch_encoding(26)
    content.append("x")
    info = parse_structured_append(content)
    assert (info.index, info.count) == (0, 4)
    assert bytes(content.bytes) == b"x"
    assert content.encodings[0].pos == 0
