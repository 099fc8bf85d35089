import copy
import logging
from enum import Enum, auto


logger = logging.getLogger(__name__)


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()


class FieldDescriptor(object):
    """The field declared in the body of a Chunk is only a template: each
    chunk gets its own copy, attached to it, the first time it's accessed."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.field = field_instance
        self.field.name = field_name

    @property
    def name(self):
        return self.field.name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self.field

        try:
            return instance.__dict__[self.name]
        except KeyError:
            logger.debug("attaching a copy of '%s' to %s", self.name, owner.__name__)
            bound = instance.__dict__[self.name] = self.field.create(father=instance)

            return bound

    def __set__(self, instance, value):
        # a chunk is a view on a buffer: assigning means writing the value
        self.__get__(instance, type(instance)).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if hasattr(cls, name):
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Layout bookkeeping of a Chunk class: the names of the fields in order
    and the offsets that don't depend on the data, filled on first use."""

    def __init__(self, fields=()):
        self.fields = list(fields)
        self.offsets = {}


class MetaChunk(type):

    def __new__(mcs, name, bases, attrs):
        '''The fields are taken out of the class body and replaced by
        descriptors; the inherited ones come first.'''
        declared = [(_k, _v) for _k, _v in attrs.items() if isinstance(_v, FieldBase)]
        for field_name, _ in declared:
            del attrs[field_name]

        new_cls = super().__new__(mcs, name, bases, attrs)

        inherited = [_ for base in bases if isinstance(base, MetaChunk) for _ in base._meta.fields]
        new_cls._meta = Meta(dict.fromkeys(inherited))

        for field_name, field in declared:
            logger.debug('%s: declaring field \'%s\'', name, field_name)
            field.contribute_to_chunk(new_cls, field_name)
            new_cls._meta.fields.append(field_name)

        return new_cls
