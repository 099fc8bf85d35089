'''
Removal of the sources embedded into a Mobipocket file.

The sections named by the headers are dropped and the following ones are moved
back to fill the hole, so the data after them must be shifted and their offsets
in the table of records must be rewritten:

    before    | s0 | s1 (source) | s2 |
    after     | s0 | s2 |

Everything happens in place inside the buffer of the file: the destination of a
move is never after its source, so the data not yet moved is never overwritten.
'''
import logging
from typing import Set

from ...exceptions import BoundsException, FormatError, UnrecoverableException


logger = logging.getLogger(__name__)


def get_source_sections(mobi) -> Set[int]:
    '''Union of the sections indicated as sources by every header generation.

    The descriptors come from the file: the part of a range going past the
    last section is ignored.'''
    sections = set()

    for index in mobi.header_indices:
        sources = mobi.get_header(index).source_sections()
        if not sources:
            continue

        logger.debug('header at section %d has sources in sections %d-%d' % (index, sources[0], sources[-1]))

        existing = sources[:max(mobi.section_count - sources.start, 0)]
        if len(existing) < len(sources):
            logger.warning(f'header at section {index} indicates sources in sections {sources[0]}-{sources[-1]}'
                           f' but sections from {sources.start + len(existing)} don\'t exist')

        sections.update(existing)

    return sections


def get_table_end(mobi) -> int:
    return mobi.records.absolute_offset + mobi.records.size


def check_layout(mobi, sections: Set[int]) -> None:
    '''Dry run of the compaction: raise FormatError if the table of records
    is not consistent, before anything is modified.'''
    table_end = get_table_end(mobi)

    for index in range(mobi.section_count):
        start, end = mobi.section_range(index)

        if start < table_end:
            raise BoundsException(f'section {index} at 0x{start:x} overlaps the table of records',
                                  chain=[f'section[{index}]'])

        if start > end or end > mobi.length:
            raise BoundsException(f'section {index} has an invalid range 0x{start:x}-0x{end:x}',
                                  chain=[f'section[{index}]'])

    for index in mobi.header_indices:
        if index in sections:
            raise FormatError(f'the header at section {index} is indicated as source', chain=[f'section[{index}]'])


def clear_section_sources(mobi) -> None:
    for header in mobi.headers():
        header.clear_sources()


def remove_sources(mobi) -> int:
    '''Drop the sections with the sources and return the new length of the
    file: the data after it is not meaningful anymore.'''
    sections = get_source_sections(mobi)

    if not sections:
        logger.info('No sources found')
        return mobi.length

    check_layout(mobi, sections)

    table_end = get_table_end(mobi)

    delta = 0
    for index in range(mobi.section_count):
        # read the range before touching the entry of this section
        offset, end = mobi.section_range(index)
        length = end - offset
        new_offset = offset - delta

        if new_offset < table_end:
            raise UnrecoverableException(
                f'section {index} would be moved over the table of records (0x{offset:x} -> 0x{new_offset:x})',
                chain=[f'section[{index}]'])

        mobi.set_section_offset(index, new_offset)

        if index in sections:
            delta += length
            logger.info('Clear data from section %d with length %d', index, length)
        elif delta:
            mobi.stream.move(offset, new_offset, length)

    mobi.truncate(mobi.length - delta)
    clear_section_sources(mobi)

    return mobi.length
