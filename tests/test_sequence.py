import pytest

from pagekit.docs.model import PageReference
from pagekit.docs.sequence import PageSequence, parse_page_ranges
from pagekit.errors import PageRangeError


def test_parse_ranges_and_singles():
    assert parse_page_ranges("1-3, 5", 5) == [1, 2, 3, 5]


def test_parse_descending_range_is_normalized():
    assert parse_page_ranges("3-1", 5) == [1, 2, 3]


def test_parse_keeps_duplicates():
    assert parse_page_ranges("2, 1-2", 3) == [2, 1, 2]


@pytest.mark.parametrize("text", ["", "   ", " , "])
def test_parse_blank(text):
    with pytest.raises(PageRangeError, match="Enter a page range."):
        parse_page_ranges(text, 4)


def test_parse_reports_bad_page_token():
    with pytest.raises(PageRangeError) as exc:
        parse_page_ranges("1, 0", 5)
    assert str(exc.value) == 'Invalid page "0". Use numbers between 1 and 5.'
    assert exc.value.token == "0"


@pytest.mark.parametrize("token", ["1-9", "1-", "a-2"])
def test_parse_reports_bad_range_token(token):
    with pytest.raises(PageRangeError, match=f'Invalid range "{token}"'):
        parse_page_ranges(token, 5)


def test_parse_rejects_non_numbers():
    with pytest.raises(PageRangeError, match='Invalid page "two"'):
        parse_page_ranges("two", 5)


@pytest.mark.parametrize("text, token", [("①", "①"), ("²", "²"), ("1-³", "1-³"), ("٣", "٣")])
def test_parse_rejects_non_ascii_digits(text, token):
    with pytest.raises(PageRangeError) as exc:
        parse_page_ranges(text, 9)
    assert exc.value.token == token


def test_parse_mixed_ranges_on_nine_pages():
    assert parse_page_ranges("1-3, 5, 7-9", 9) == [1, 2, 3, 5, 7, 8, 9]


def test_parse_single_page_past_the_end():
    with pytest.raises(PageRangeError) as exc:
        parse_page_ranges("10", 9)
    assert exc.value.token == "10"
    assert str(exc.value) == 'Invalid page "10". Use numbers between 1 and 9.'


def test_sequence_append_and_loaded(three_page_pdf):
    seq = PageSequence()
    assert not seq.loaded
    seq.append(three_page_pdf)
    assert seq.loaded
    assert [r.page_index for r in seq] == [0, 1, 2]
    seq.clear()
    assert not seq.loaded and seq.is_empty


def test_sequence_append_rejects_bad_index(three_page_pdf):
    seq = PageSequence()
    with pytest.raises(IndexError):
        seq.append(three_page_pdf, [0, 3])
    assert len(seq) == 0


def test_reorder_moves_one_entry():
    seq = PageSequence([PageReference("a", i) for i in range(4)])
    seq.reorder(0, 2)
    assert [r.page_index for r in seq] == [1, 2, 0, 3]
    seq.reorder(3, 0)
    assert [r.page_index for r in seq] == [3, 1, 2, 0]


def test_reorder_out_of_range_leaves_sequence():
    seq = PageSequence([PageReference("a", i) for i in range(2)])
    with pytest.raises(IndexError):
        seq.reorder(0, 5)
    assert seq.snapshot() == (PageReference("a", 0), PageReference("a", 1))


def test_remove_at_and_remove_handle():
    seq = PageSequence([PageReference("a", 0), PageReference("b", 0), PageReference("a", 1)])
    assert seq.remove_at(1) == PageReference("b", 0)
    assert seq.remove_handle("a") == 2
    assert seq.is_empty
    # emptied by edits, but a document was loaded
    assert seq.loaded


def test_snapshot_is_independent_of_later_edits():
    seq = PageSequence([PageReference("a", 0), PageReference("a", 1)])
    snap = seq.snapshot()
    seq.remove_at(0)
    assert len(snap) == 2
    assert seq.handle_ids() == ["a"]
