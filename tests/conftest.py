import pytest

from mobiless.containers.pdb import PDBHeader, RecordInfo
from mobiless.ebooks.mobi import MOBIHeader, BOUNDARY, NO_SOURCES
from mobiless.ebooks.mobi.enum import MobiEncoding


def make_header(title=b'A book', sources=(NO_SOURCES, 0), version=6, encoding=MobiEncoding.UTF8, padding=0x10):
    '''Record containing the PalmDOC and MOBI headers followed by the title.'''
    header = MOBIHeader()
    header.version.value = version
    header.encoding.value = encoding
    header.full_name_offset.value = header.size
    header.full_name_length.value = len(title)
    header.srcs_index.value, header.srcs_count.value = sources

    return header.raw + title + b'\x00' * padding


def make_container(sections, name=b'a_book'):
    '''BOOKMOBI container with the given sections, the table of records is
    followed by the usual two bytes of padding.'''
    header = PDBHeader()
    header.db_name.value = name.ljust(32, b'\x00')
    header.num_records.value = len(sections)

    data = bytearray(header.raw)

    offset = len(data) + 8 * len(sections) + 2
    for index, section in enumerate(sections):
        record = RecordInfo()
        record.data_offset.value = offset
        record.attributes.value = 0x40
        record.unique_id.value = 2 * index
        data += record.raw
        offset += len(section)

    data += b'\x00\x00'

    for section in sections:
        data += section

    return data


@pytest.fixture
def build_header():
    return make_header


@pytest.fixture
def build_container():
    return make_container


@pytest.fixture
def single_book():
    '''Scenario with one header: the section 1 (100 bytes) contains the sources.'''
    return make_container([
        make_header(sources=(1, 1)),
        b'S' * 100,
        b'some text ' * 10,
    ])


@pytest.fixture
def dual_book():
    '''Two header generations separated by the boundary, each with its own sources.'''
    return make_container([
        make_header(title=b'Old format', sources=(1, 1)),
        b'A' * 50,
        b'old text ' * 8,
        BOUNDARY,
        make_header(title=b'KF8 format', sources=(5, 2), version=8),
        b'B' * 30,
        b'C' * 20,
        b'new text ' * 6,
    ])


@pytest.fixture
def clean_book():
    return make_container([
        make_header(),
        b'text ' * 20,
        b'more text ' * 5,
    ])
