'''
# Palm Database format

Container used by the PalmOS devices and inherited by the Mobipocket e-books:
a fixed header followed by a table of records, each entry of the table is

  .----------------------------.
  | 4 bytes  record data offset |
  | 1 byte   record attributes  |
  | 3 bytes  unique id          |
  '----------------------------'

the data of a record goes from its offset to the offset of the next record
(the last one ends with the file). Everything is big-endian.

The records are called sections here, like the Mobipocket documentation does.

Reference at <https://wiki.mobileread.com/wiki/PDB>.
'''
import logging
from typing import Tuple, Type, Iterator

from ...core import Chunk
from ... import fields
from ...enum import Compliant
from ...exceptions import BoundsException
from ...properties import Dependency
from ...streams import Stream


logger = logging.getLogger(__name__)

# type and creator of an e-book, it's the identifier of the whole container
BOOKMOBI = b'BOOKMOBI'


class PDBHeader(Chunk):
    db_name             = fields.StringField(32)
    attributes          = fields.StructField('H')
    version             = fields.StructField('H')
    created             = fields.StructField('I')
    modified            = fields.StructField('I')
    backed_up           = fields.StructField('I')
    modification_number = fields.StructField('I')
    app_info_offset     = fields.StructField('I')
    sort_info_offset    = fields.StructField('I')
    ident               = fields.StringField(8, default=BOOKMOBI, is_magic=True)
    unique_id_seed      = fields.StructField('I')
    next_record_list    = fields.StructField('I')
    num_records         = fields.StructField('H')

    def database_name(self) -> str:
        return self.db_name.value.rstrip(b'\x00').decode('latin1')


class RecordInfo(Chunk):
    '''Entry of the records table: only the offset is ever modified, the
    remaining bytes are left as they are.'''
    data_offset = fields.StructField('I')
    attributes  = fields.StructField('B')
    unique_id   = fields.BitField(24)


class Section(Chunk):
    '''View of the data of a record: it's valid until the table of records
    is modified, so don't keep it around.'''

    def __init__(self, stream=None, start=0, end=None, index=0, **kwargs):
        self.index = index

        size = None
        if stream is not None:
            if end is None:
                end = len(stream)
            if not 0 <= start <= end <= len(stream):
                raise BoundsException(
                    f'section {index} has an invalid range 0x{start:x}-0x{end:x} (length 0x{len(stream):x})',
                    chain=[f'section[{index}]'])
            size = end - start

        super().__init__(stream=stream, offset=start, size=size, **kwargs)

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.index} at 0x{self.absolute_offset:08x}>'

    def __len__(self):
        return self.size

    @property
    def start(self):
        return self.absolute_offset

    @property
    def end(self):
        return self.absolute_offset + self.size

    @property
    def data(self) -> bytes:
        return self.raw


class PDBFile(Chunk):
    '''The whole container: since the data must be modified in place pass
    a bytearray, bytes and paths are copied in memory.

    The logical length can be smaller than the buffer, the data after it is
    ignored.'''
    header  = PDBHeader()
    records = fields.ArrayField(RecordInfo(), n=Dependency('header.num_records'))

    def __init__(self, data, length=None, compliant=Compliant.MAGIC):
        stream = data if isinstance(data, Stream) else Stream(data, length=length)
        super().__init__(stream=stream, offset=0, compliant=compliant)

        # the header is fine, now check that the table fits into the data
        try:
            self.stream.check(self.records.absolute_offset, self.records.size)
        except BoundsException as e:
            e.chain.extend(['records', self.__class__.__name__])
            raise

        logger.debug('found %d sections' % self.section_count)

    def __repr__(self):
        return f'<{self.__class__.__name__}(name={self.header.database_name()!r},sections={self.section_count})>'

    @property
    def length(self) -> int:
        return self.stream.length

    @property
    def section_count(self) -> int:
        return self.header.num_records.value

    def _get_size(self):
        return self.stream.length

    def _get_raw(self) -> bytes:
        return self.stream.getvalue()

    def _record(self, index) -> RecordInfo:
        try:
            return self.records[index]
        except IndexError:
            raise BoundsException(
                f'section {index} doesn\'t exist (there are {self.section_count} sections)',
                chain=[f'records[{index}]'])

    def section_offset(self, index) -> int:
        return self._record(index).data_offset.value

    def set_section_offset(self, index, value) -> None:
        '''Overwrite only the offset of the record, the attributes and the
        unique id are left untouched.'''
        self._record(index).data_offset.value = value

    def section_range(self, index) -> Tuple[int, int]:
        start = self.section_offset(index)
        end = self.length if index == self.section_count - 1 else self.section_offset(index + 1)

        return start, end

    def section_length(self, index) -> int:
        start, end = self.section_range(index)
        return end - start

    def section(self, index, cls: Type[Section] = Section, **kwargs) -> Section:
        '''Build a fresh view of the section at the given index.'''
        start, end = self.section_range(index)
        return cls(self.stream, start, end, index, **kwargs)

    def sections(self) -> Iterator[Section]:
        for index in range(self.section_count):
            yield self.section(index)

    def truncate(self, length) -> None:
        self.stream.truncate(length)
