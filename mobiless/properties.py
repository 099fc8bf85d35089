import logging
from typing import List


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    while not condition(instance):
        instance = instance.father

    return instance


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the length of the string contained in the field named 'data'
    read from the field named 'length' each time it's needed.

    The syntax for defining the expression is inspired from module resolution:

     - '.length' indicates a field at the same level (i.e. a sibling)
     - 'header.num_records' is resolved starting from the root chunk
    '''
    def __init__(self, expression):
        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        self.logger.debug('trying to resolve \'%s\' for \'%s\'' % (
            self.expression,
            instance.__class__.__name__,
        ))

        fields_path: List[str] = self.expression.split('.')
        # '.length'.split(".") -> ['', 'length']

        if fields_path[0] == '':
            field = instance.father
            fields_path = fields_path[1:]
        else:
            field = get_root_from_chunk(instance)

        if field is None:
            raise AttributeError(f"cannot resolve '{self.expression}' for a field without a father")

        for component_name in fields_path:
            field = getattr(field, component_name)

        self.logger.debug(' resolved as field %s' % field.__class__.__name__)

        return field

    def resolve(self, instance):
        '''Return the value of the field the expression points to with respect
        to the instance passed as argument.'''
        value = self.resolve_field(instance).value

        return value.value if hasattr(value, 'value') else value

