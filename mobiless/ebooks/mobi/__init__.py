'''
# Mobipocket format

A Mobipocket e-book is a Palm Database with type and creator "BOOKMOBI".
The first section starts with the PalmDOC header (16 bytes) followed by the
MOBI header, identified by the magic "MOBI" at offset 0x10.

The files generated by kindlegen can be dual-format: after the sections of
the old format there is a section containing only "BOUNDARY" followed by a
second MOBI header (version 8) with its own sections.

The publishing toolchain embeds also the original sources (the SRCS records)
and each header indicates them with the pair (srcs_index, srcs_count) at
offsets 0xe0 and 0xe4.

Reference at <https://wiki.mobileread.com/wiki/MOBI>.
'''
import logging
from typing import List

from ...containers.pdb import PDBFile, Section
from ... import fields
from ...enum import Compliant
from ...exceptions import DecodeException
from ...properties import Dependency
from .enum import (
    PalmDOCCompression,
    PalmDOCEncryption,
    MobiType,
    MobiEncoding,
)


logger = logging.getLogger(__name__)

# content of the section separating two header generations
BOUNDARY = b'BOUNDARY'
# value of srcs_index when there are no sources
NO_SOURCES = 0xffffffff


def is_boundary(section: Section) -> bool:
    return len(section) == len(BOUNDARY) and section.data == BOUNDARY


class MOBIHeader(Section):
    '''The first section of a header generation: the PalmDOC header and the MOBI
    header. Only the fields needed to describe the document and to find the
    sources are defined, the others are left alone.'''
    # PalmDOC header
    compression      = fields.StructField('H', enum=PalmDOCCompression, default=PalmDOCCompression.PALMDOC)
    unused           = fields.StructField('H')
    text_length      = fields.StructField('I')
    record_count     = fields.StructField('H')
    record_size      = fields.StructField('H', default=4096)
    encryption       = fields.StructField('H', enum=PalmDOCEncryption, default=PalmDOCEncryption.NONE)
    unknown          = fields.StructField('H')
    # MOBI header
    identifier       = fields.StringField(4, default=b'MOBI', is_magic=True)
    header_length    = fields.StructField('I', default=0xe8)
    mobi_type        = fields.StructField('I', enum=MobiType, default=MobiType.BOOK)
    encoding         = fields.StructField('I', enum=MobiEncoding, default=MobiEncoding.UTF8)
    unique_id        = fields.StructField('I')
    version          = fields.StructField('I', default=6)
    full_name_offset = fields.StructField('I', offset=0x54)
    full_name_length = fields.StructField('I')
    srcs_index       = fields.StructField('I', offset=0xe0, default=NO_SOURCES)
    srcs_count       = fields.StructField('I')
    full_name        = fields.StringField(Dependency('.full_name_length'), offset=Dependency('.full_name_offset'))

    @property
    def title(self) -> str:
        encoding = self.encoding.value
        codec = encoding.codec if isinstance(encoding, MobiEncoding) else MobiEncoding.UTF8.codec

        try:
            return self.full_name.value.decode(codec)
        except UnicodeDecodeError as e:
            raise DecodeException(f'the title is not valid {codec}: {e}', chain=['full_name', self.__class__.__name__])

    def source_sections(self) -> range:
        '''The indices of the sections with the sources, empty if there are none.'''
        start = self.srcs_index.value
        count = self.srcs_count.value

        if start == NO_SOURCES or count == 0:
            return range(0)

        return range(start, start + count)

    def clear_sources(self) -> None:
        self.srcs_index.value = NO_SOURCES
        self.srcs_count.value = 0


class MOBIFile(PDBFile):
    '''Mobipocket e-book: at creation the header generations are found and
    validated, nothing is modified until remove_sources() is called.'''

    def __init__(self, data, length=None, compliant=Compliant.MAGIC):
        super().__init__(data, length=length, compliant=compliant)

        self.header_indices = self.find_headers()

        for index in self.header_indices:
            header = self.get_header(index)
            logger.info('Header version %d found', header.version.value)
            logger.info('   Title: %s', header.title)
            logger.info('   Encoding: %s', header.encoding.value)

    def is_header(self, index) -> bool:
        '''Check only the magic, without validating the rest of the header.'''
        return self.section(index, MOBIHeader, lazy=True).has_valid_magic()

    def find_headers(self) -> List[int]:
        '''Return the indices of the sections starting a header generation:
        the first section and every section with the MOBI magic that follows
        a BOUNDARY section.'''
        indices = [0]

        for index in range(self.section_count - 1):
            if not is_boundary(self.section(index)):
                continue

            if self.is_header(index + 1):
                logger.debug('found header generation at section %d' % (index + 1))
                indices.append(index + 1)

        return indices

    def get_header(self, index) -> MOBIHeader:
        '''Build a view of the header at the given index, its magic must be correct.'''
        return self.section(index, MOBIHeader, compliant=self.compliant | Compliant.MAGIC)

    def headers(self):
        for index in self.header_indices:
            yield self.get_header(index)

    def remove_sources(self) -> int:
        from .sources import remove_sources

        return remove_sources(self)
