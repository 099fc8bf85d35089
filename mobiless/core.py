"""
Core module for the abstraction of a record

"""
from typing import Tuple, List, Dict

from .fields import Field
from .enum import Compliant
from .meta import MetaChunk
from .streams import Stream
from .exceptions import FormatError


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Chunk.

    A Chunk can contain sub-chunks: the fields are laid out one after the other
    in the order of declaration, unless a field indicates explicitly its offset.

    A Chunk created with a stream is a view on it starting at the given offset
    (and optionally limited to the given size) and it's validated immediately
    unless lazy is True; without a stream (and without a father) it gets its own
    zeroed buffer with the defaults written into it.
    """

    def __init__(self, stream=None, offset=None, size=None, compliant=Compliant.INHERIT, lazy=False, **kwargs):
        super().__init__(offset=offset, compliant=compliant, **kwargs)
        self.stream = stream
        self.limit = size

        # now we have setup all the fields necessary and we can validate if
        # some data is passed with the constructor
        if self.stream is not None and not lazy:
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, self.stream))
            self.unpack()

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def init(self):
        for _, field in self.get_fields():
            if field.has_dependencies():
                continue
            field.init()

    def has_static_layout(self):
        return super().has_static_layout() and all(
            field.has_static_layout() for _, field in self.get_fields() if not field.is_pointed())

    def offset_of(self, child: Field) -> int:
        '''Offset of a field without an explicit one: it's placed just after the previous field.

        The fields are walked once carrying the end of the previous one; the
        offsets preceded only by fields with a static layout are the same for
        every instance so they are remembered in the class metadata.'''
        offsets = self._meta.offsets
        if child.name in offsets:
            return offsets[child.name]

        cursor = 0
        static = True
        for name, field in self.get_fields():
            offset = field.explicit_offset()
            if offset is None:
                offset = cursor

            static = static and field.has_static_layout()
            if static:
                offsets[name] = offset

            if field is child:
                return offset

            # a field pointed by another one lives outside the layout
            if not field.is_pointed():
                cursor = offset + field.size

        raise ValueError(f'{child!r} is not a field of {self.__class__.__name__}')

    def _get_size(self):
        '''If not indicated explicitly the size is derived from the sub-fields'''
        if self.limit is not None:
            return self.limit

        # a field pointed by another one lives outside the layout
        sizes = [field.offset + field.size for _, field in self.get_fields() if not field.is_pointed()]

        return max(sizes, default=0)

    def static_size(self):
        '''Size obtainable without reading the data, i.e. ignoring the fields
        with a Dependency.'''
        if self.limit is not None:
            return self.limit

        sizes = [
            field.offset + field.static_size() for _, field in self.get_fields() if not field.has_dependencies()
        ]

        return max(sizes, default=0)

    def get_backend(self) -> Stream:
        if self.father is None and self.stream is None:
            self.stream = Stream(bytearray(self.static_size()))
            self.init()

        return self.stream if self.father is None else self.father.get_backend()

    def _get_value(self):
        return self

    def _get_raw(self) -> bytes:
        return self._read(self.size)

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        for name, field in self.get_fields():
            result[name] = (field.offset, field.size)

        return result

    def has_valid_magic(self) -> bool:
        '''True if all the magic fields contain the expected values.'''
        return all(field.has_valid_magic() for _, field in self.get_fields() if field.is_magic)

    def unpack(self):
        '''This is one of the main APIs to take care of: since the data is read
        lazily here we only check that the fields with fixed offset and size
        are inside the data and that the magic fields are correct.

        The fields with a Dependency are checked when accessed.
        '''
        for field_name, field in self.get_fields():
            if field.has_dependencies():
                continue

            self.logger.debug('unpacking %s.%s' % (self.__class__.__name__, field_name))

            try:
                field.unpack()
            except FormatError as e:
                e.chain.append(self.__class__.__name__)
                raise
