import logging

import pytest

from mobiless.ebooks.mobi import MOBIFile, BOUNDARY, NO_SOURCES
from mobiless.ebooks.mobi import sources
from mobiless.ebooks.mobi.sources import get_source_sections, check_layout
from mobiless.exceptions import FormatError, BoundsException, UnrecoverableException


def snapshot(mobi):
    return [mobi.section_range(_) for _ in range(mobi.section_count)]


def test_scenario_single_source(single_book):
    original = bytes(single_book)
    mobi = MOBIFile(single_book)
    before = snapshot(mobi)

    length = mobi.remove_sources()

    assert length == len(original) - 100
    assert mobi.length == length

    assert mobi.section_offset(0) == before[0][0]
    assert mobi.section_offset(2) == before[2][0] - 100
    # the table keeps the same number of entries, the removed one is empty
    assert mobi.section_count == 3
    assert mobi.section_length(1) == 0

    assert mobi.section(2).data == b'some text ' * 10
    assert b'S' * 100 not in single_book[:length]
    # the data before the removed section is left where it was
    assert single_book[before[0][0] + 0xe8:before[1][0]] == original[before[0][0] + 0xe8:before[1][0]]


def test_header_clearing(dual_book):
    mobi = MOBIFile(dual_book)

    mobi.remove_sources()

    for header in mobi.headers():
        assert header.srcs_index.value == NO_SOURCES
        assert header.srcs_count.value == 0


def test_scenario_dual_headers(dual_book):
    original_length = len(dual_book)
    mobi = MOBIFile(dual_book)

    assert get_source_sections(mobi) == {1, 5, 6}

    length = mobi.remove_sources()

    assert length == original_length - 50 - 30 - 20
    assert mobi.header_indices == [0, 4]
    assert [_.source_sections() for _ in mobi.headers()] == [range(0), range(0)]

    data = dual_book[:length]
    for removed in (b'A' * 50, b'B' * 30, b'C' * 20):
        assert removed not in data

    # the file is still valid and the headers are still found
    mobi = MOBIFile(data)
    assert mobi.header_indices == [0, 4]
    assert [_.title for _ in mobi.headers()] == ['Old format', 'KF8 format']
    assert mobi.section(3).data == BOUNDARY
    assert mobi.section(7).data == b'new text ' * 6


def test_offset_consistency(dual_book):
    mobi = MOBIFile(dual_book)
    before = snapshot(mobi)
    removed = get_source_sections(mobi)

    mobi.remove_sources()

    for index, (start, end) in enumerate(before):
        delta = sum(e - s for i, (s, e) in enumerate(before) if i < index and i in removed)
        assert mobi.section_offset(index) == start - delta


def test_length_conservation(dual_book):
    mobi = MOBIFile(dual_book)
    before = snapshot(mobi)
    length = mobi.length

    new_length = mobi.remove_sources()

    assert new_length == length - sum(before[_][1] - before[_][0] for _ in {1, 5, 6})


def test_remaining_data_is_preserved(dual_book):
    mobi = MOBIFile(dual_book)
    kept = [mobi.section(_).data for _ in range(mobi.section_count) if _ not in {0, 1, 4, 5, 6}]

    mobi.remove_sources()

    assert [mobi.section(_).data for _ in range(mobi.section_count) if _ not in {0, 1, 4, 5, 6}] == kept


def test_no_sources_is_noop(clean_book):
    original = bytes(clean_book)
    mobi = MOBIFile(clean_book)

    assert mobi.remove_sources() == len(original)
    assert clean_book == original


def test_idempotence(dual_book):
    mobi = MOBIFile(dual_book)
    length = mobi.remove_sources()
    stripped = bytes(dual_book[:length])

    mobi = MOBIFile(dual_book, length=length)

    assert mobi.remove_sources() == length
    assert dual_book[:length] == stripped


@pytest.mark.parametrize('descriptor', [(NO_SOURCES, 0), (NO_SOURCES, 2), (2, 0)])
def test_scenario_empty_descriptor(build_container, build_header, descriptor):
    """A generation without sources contributes nothing, whatever the other does."""
    data = build_container([
        build_header(sources=descriptor),
        b'text one',
        b'text two',
        BOUNDARY,
        build_header(sources=(5, 1), version=8),
        b'Z' * 40,
        b'text three',
    ])
    length = len(data)

    mobi = MOBIFile(data)

    assert get_source_sections(mobi) == {5}
    assert mobi.remove_sources() == length - 40
    assert mobi.section(1).data == b'text one'
    assert mobi.section(2).data == b'text two'
    assert mobi.section(6).data == b'text three'


def test_missing_magic_leaves_data_untouched(single_book):
    single_book[0x3c:0x44] = b'BOOKMOBX'
    original = bytes(single_book)

    with pytest.raises(FormatError):
        MOBIFile(single_book).remove_sources()

    assert single_book == original


def test_header_as_source(build_container, build_header):
    data = build_container([build_header(sources=(0, 2)), b'x' * 10, b'y' * 10])
    original = bytes(data)

    with pytest.raises(FormatError):
        MOBIFile(data).remove_sources()

    assert data == original


def test_sources_outside_table(build_container, build_header, caplog):
    caplog.set_level(logging.WARNING)
    data = build_container([build_header(sources=(2, 5)), b'x' * 10, b'y' * 10])
    length = len(data)

    mobi = MOBIFile(data)

    assert mobi.remove_sources() == length - 10
    assert 'don\'t exist' in caplog.text


def test_malformed_table(dual_book):
    mobi = MOBIFile(dual_book)
    # make the last section start after the end of the data
    mobi.set_section_offset(7, mobi.length + 1)
    original = bytes(dual_book)

    with pytest.raises(BoundsException):
        mobi.remove_sources()

    assert dual_book == original


def test_check_layout_overlapping_table(dual_book):
    mobi = MOBIFile(dual_book)
    mobi.set_section_offset(1, 0x50)
    mobi.set_section_offset(2, 0x50)

    with pytest.raises(BoundsException):
        check_layout(mobi, {5})


def test_removed_sections_are_logged(single_book, caplog):
    caplog.set_level(logging.INFO)

    MOBIFile(single_book).remove_sources()

    assert 'Clear data from section 1 with length 100' in caplog.text


@pytest.mark.parametrize('descriptor', [(1, 20_000_000), (1, 0xffffffff), (0xfffffffe, 0xffffffff)])
def test_huge_source_count(build_container, build_header, descriptor, caplog):
    caplog.set_level(logging.WARNING)
    data = build_container([build_header(sources=descriptor), b'x' * 10, b'y' * 10])

    mobi = MOBIFile(data)
    sections = get_source_sections(mobi)

    assert sections == ({1, 2} if descriptor[0] == 1 else set())
    assert 'don\'t exist' in caplog.text


def test_many_sections(build_container, build_header):
    data = build_container(
        [build_header(sources=(1, 150))] + [b'S' * 16] * 150 + [b't' * 16] * 149
    )
    length = len(data)

    mobi = MOBIFile(data)
    first_text = mobi.section_offset(151)

    assert mobi.remove_sources() == length - 150 * 16
    assert mobi.section_count == 300
    assert mobi.section_offset(151) == first_text - 150 * 16
    assert mobi.section(299).data == b't' * 16


def test_move_over_the_table(build_container, build_header, monkeypatch):
    """Without the dry run a section pointing inside the table is detected during the pass."""
    data = build_container([build_header(sources=(2, 1)), b'text', b'S' * 20, b'tail'])
    mobi = MOBIFile(data)
    mobi.set_section_offset(2, 0x10)

    monkeypatch.setattr(sources, 'check_layout', lambda mobi, sections: None)

    with pytest.raises(UnrecoverableException):
        mobi.remove_sources()
