"""
A Field is "fundamental" datatype from the format point of view: it knows its
offset (relative to the chunk containing it) and its size, and reads/writes its
value directly from/to the underlying buffer every time it's accessed.

Nothing is cached so a field never shows a stale value after someone else
modified the buffer.
"""
import logging
import struct
from enum import Enum

from bitstring import Bits

from .enum import Compliant
from .meta import FieldBase, Endianess
from .properties import Dependency
from .streams import Stream
from .exceptions import FormatError, BoundsException, MagicException


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.BIG_ENDIAN, compliant=Compliant.INHERIT, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.stream = None
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic

    def init(self):
        '''Write the default value into the buffer'''
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def get_backend(self) -> Stream:
        """This is the backend used by the field for storage operations: a field
        without a father and without data gets a zeroed buffer of its own size."""
        if self.father is not None:
            return self.father.get_backend()

        if self.stream is None:
            self.stream = Stream(bytearray(self.static_size()))
            self.init()

        return self.stream

    def get_dependencies(self):
        """Return the dictionary containing the attributes that are resolved via Dependency"""
        return {_k: _v for _k, _v in self.__dict__.items() if isinstance(_v, Dependency)}

    def has_dependencies(self):
        return len(self.get_dependencies()) > 0

    def is_compliant(self, level):
        '''Returns True if this field (or its fathers, when INHERIT is set) requires the given level'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def __set_offset(self, value):
        self._offset = value

    def __get_offset(self):
        offset = self.explicit_offset()
        if offset is not None:
            return offset

        # without an explicit offset the field follows the previous one
        return self.father.offset_of(self) if self.father is not None else 0

    offset = property(__get_offset, __set_offset)

    def explicit_offset(self):
        '''Offset given at declaration, None if the field follows the previous one'''
        if isinstance(self._offset, Dependency):
            return self._offset.resolve(self)

        return self._offset

    def has_static_layout(self):
        '''True if offset and size can be known without reading the data'''
        return not self.has_dependencies()

    def is_pointed(self):
        '''True if the position of the field is read from another field'''
        return isinstance(self._offset, Dependency)

    @property
    def absolute_offset(self):
        '''Offset with respect to the start of the buffer'''
        if self.father is None:
            return self.offset

        return self.father.absolute_offset + self.offset

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_value(self):
        value = self._decode(self._read(self.size))
        self._check_magic(value)

        return value

    def _set_value(self, value) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}._set_value() not implemented")

    def _decode(self, raw: bytes):
        raise NotImplementedError(f"method {self.__class__.__name__}._decode() not implemented")

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def static_size(self):
        return self.size

    def _get_raw(self) -> bytes:
        return self._read(self.size)

    def _set_raw(self, value) -> None:
        if len(value) != self.size:
            raise ValueError(f'you are trying to set a raw value with the wrong size (that is {self.size} bytes)')

        self._write(value)

    raw = property(
        fget=lambda self: self._get_raw(),
        fset=lambda self, value: self._set_raw(value),
    )

    def _check_bounds(self, size):
        limit = getattr(self.father, 'limit', None)
        offset = self.offset

        if offset < 0 or (limit is not None and offset + size > limit):
            raise BoundsException(
                f'field at {offset:#x} with size {size:#x} exceeds its record ({limit!r} bytes)',
                chain=[self.name or self.__class__.__name__])

    def _read(self, size) -> bytes:
        self._check_bounds(size)
        try:
            return self.get_backend().seek(self.absolute_offset).read(size)
        except BoundsException as e:
            e.chain.append(self.name or self.__class__.__name__)
            raise

    def _write(self, raw: bytes) -> None:
        self._check_bounds(len(raw))
        try:
            self.get_backend().seek(self.absolute_offset).write(raw)
        except BoundsException as e:
            e.chain.append(self.name or self.__class__.__name__)
            raise

    def _check_magic(self, value):
        if not self.is_magic or value == self.value_from_default():
            return

        self.logger.warning(f'the magic of \'{self.name}\' doesn\'t correspond: {value!r}')
        if self.is_compliant(Compliant.MAGIC):
            raise MagicException(
                f'expected magic {self.value_from_default()!r}, found {value!r}', chain=[self.name])

    def has_valid_magic(self) -> bool:
        '''Check the magic without raising or logging anything'''
        try:
            return self._decode(self._read(self.size)) == self.value_from_default()
        except FormatError:
            return False

    def unpack(self):
        '''Read the value so that any inconsistency with the format is raised now'''
        return self.value


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if not self.enum:
            return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

        return f'<{self.__class__.__name__}({self.value!r})>'

    def __str__(self):
        value = self.value
        width = self.size * 2  # we want to be as large as possible
        formatter = '0x%%0%dx' % width
        return formatter % (value.value if isinstance(value, Enum) else value,)

    def value_from_default(self):
        if not self.enum or isinstance(self.default, self.enum):
            return self.default

        return self.enum(self.default)

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _set_value(self, value) -> None:
        raw = struct.pack(self.get_format(), value.value if isinstance(value, Enum) else value)
        self._write(raw)

    def _unpack_enum(self, value: int):
        try:
            return self.enum(value)
        except ValueError:
            if self.is_compliant(Compliant.ENUM):
                raise FormatError(f'{self.enum.__name__} doesn\'t have element with value 0x{value:x}',
                                  chain=[self.name])

            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

        return value

    def _decode(self, raw: bytes):
        value = struct.unpack(self.get_format(), raw)[0]
        if self.enum:
            value = self._unpack_enum(value)

        return value


class StringField(Field):
    """Represent a contiguous chunk of bytes; the length can be a Dependency."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self._length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    @property
    def length(self):
        if isinstance(self._length, Dependency):
            return self._length.resolve(self)

        return self._length

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def _get_size(self):
        return self.length

    def _decode(self, raw: bytes):
        return raw

    def _set_value(self, value) -> None:
        if len(value) != self.length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        self._write(value)


class BitField(Field):
    """Unsigned integer with a number of bits not supported by struct (like
    the 24 bits of the unique id of the PDB records)."""

    def __init__(self, bits, default=0, **kw):
        if bits % 8:
            raise ValueError('BitField must be byte aligned')

        self.bits = bits
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def _get_size(self):
        return self.bits // 8

    def _decode(self, raw: bytes):
        bits = Bits(raw)
        return bits.uint if self.endianess == Endianess.BIG_ENDIAN else bits.uintle

    def _set_value(self, value) -> None:
        if self.endianess == Endianess.BIG_ENDIAN:
            bits = Bits(uint=value, length=self.bits)
        else:
            bits = Bits(uintle=value, length=self.bits)

        self._write(bits.bytes)


class ArrayField(Field):
    '''Contiguous elements of the same kind.

    You indicate the number of elements via the parameter named "n", as an
    integer or a Dependency. The elements are views created on access.

    This class must behave like a list in python, obviously cannot implement all the methods
    since, for example, slicing what should mean?
    '''

    def __init__(self, field_cls, n=0, **kw):
        if not isinstance(n, (int, Dependency)):
            raise ValueError('n is \'%s\' must be of the right type' % n.__class__.__name__)

        self.field_cls = field_cls
        self._n = n

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}(n={len(self)})>'

    def has_static_layout(self):
        return super().has_static_layout() and self.field_cls.has_static_layout()

    @property
    def n(self):
        if isinstance(self._n, Dependency):
            return self._n.resolve(self)

        return self._n

    def __len__(self):
        return self.n

    def __getitem__(self, index):
        if not 0 <= index < len(self):
            raise IndexError(f'index {index} out of range for {len(self)} elements')

        element = self.field_cls.create(father=self)
        element.offset = index * element.static_size()

        return element

    def __iter__(self):
        for index in range(len(self)):
            yield self[index]

    def _get_value(self):
        return list(self)

    def _get_size(self):
        return len(self) * self.field_cls.static_size()

    def init(self):
        for element in self:
            element.init()

    def unpack(self):
        for element in self:
            element.unpack()
