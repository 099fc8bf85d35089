import pytest

from mobiless.core import Chunk
from mobiless.fields import StructField, StringField
from mobiless.meta import Meta
from mobiless.properties import Dependency
from mobiless.streams import Stream


def test_chunk():
    """Check that building a Chunk from fields behaves correctly."""
    class Dummy(Chunk):
        a = StructField('I', default=0xbad)
        b = StringField(0x10)
        c = StructField('I', default=0xdeadbeef)

    dummy = Dummy()

    assert isinstance(dummy._meta, Meta)
    assert dummy._meta.fields == ['a', 'b', 'c']

    assert dummy.a.size == 4
    assert dummy.a.raw == b'\x00\x00\x0b\xad'
    assert dummy.a.value == 0xbad
    assert dummy.a.offset == 0x00
    assert dummy.a.father == dummy

    assert dummy.b.size == 0x10
    assert dummy.b.raw == b'\x00' * 0x10
    assert dummy.b.offset == 0x04

    assert dummy.c.size == 0x4
    assert dummy.c.raw == b'\xde\xad\xbe\xef'
    assert dummy.c.offset == 0x14

    assert dummy.size == 0x18
    assert len(dummy.raw) == dummy.size
    assert dummy.raw == (
        b'\x00\x00\x0b\xad' +
        b'\x00' * 0x10 +
        b'\xde\xad\xbe\xef'
    )


def test_inheritance():
    '''subclasses inherit fields'''
    class Father(Chunk):
        field_a = StringField(0x10)
        field_b = StructField('I')

    class Son(Father):
        field_c = StringField(0x08)

    field_b_value = b'\x01\x02\x03\x04'
    field_c_value = b'ABCDEFGH'
    son = Son(Stream(b'A' * 16 + field_b_value + field_c_value))

    assert [_ for _, __ in son.get_fields()] == [
        'field_a', 'field_b', 'field_c',
    ]

    assert son.field_b.value == 0x01020304
    assert son.field_c.value == field_c_value


def test_field_name_already_used():
    with pytest.raises(AttributeError):
        class Wrong(Chunk):
            size = StructField('I')


def test_nested_chunks():
    class Inner(Chunk):
        x = StructField('H')
        y = StructField('H')

    class Outer(Chunk):
        magic = StringField(2)
        inner = Inner()
        tail  = StructField('B')

    data = bytearray(b'OK\x00\x01\x00\x02\x03')
    outer = Outer(Stream(data))

    assert outer.layout == {
        'magic': (0, 2),
        'inner': (2, 4),
        'tail': (6, 1),
    }
    assert outer.inner.y.value == 2
    assert outer.inner.y.absolute_offset == 4

    outer.inner.x.value = 0xabcd

    assert data == b'OK\xab\xcd\x00\x02\x03'


def test_explicit_offsets():
    """Fields can be placed explicitly, the ones after follow them."""
    class Sparse(Chunk):
        first  = StructField('B')
        second = StructField('B', offset=0x08)
        third  = StructField('H')

    sparse = Sparse()

    assert sparse.layout == {
        'first': (0, 1),
        'second': (8, 1),
        'third': (9, 2),
    }
    assert sparse.size == 11
    assert sparse.raw == b'\x00' * 11


def test_pointed_fields():
    """A field whose offset is read from another one is not part of the layout."""
    class Pointer(Chunk):
        where = StructField('B')
        count = StructField('B')
        text  = StringField(Dependency('.count'), offset=Dependency('.where'))

    pointer = Pointer(Stream(bytearray(b'\x04\x02xxhi')))

    assert pointer.text.value == b'hi'
    assert pointer.text.offset == 4
    assert pointer.size == 2
    assert pointer.text.is_pointed()
    assert not pointer.count.is_pointed()


def test_view_at_offset():
    class Pair(Chunk):
        a = StructField('B')
        b = StructField('B')

    data = bytearray(b'\x00\x00\x00\x01\x02')
    pair = Pair(Stream(data), offset=3)

    assert pair.a.value == 1
    assert pair.b.value == 2
    assert pair.raw == b'\x01\x02'
