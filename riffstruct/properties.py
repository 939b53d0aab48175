import inspect
import logging
from enum import Enum, auto


class ChunkPhase(Enum):
    '''Enum to state the actual phase of a chunk'''
    INIT      = 0
    UNPACKING = auto()
    DONE      = auto()
    ERROR     = auto()


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the length of the string contained in the field named 'data'
    read from the field named 'length' at the moment 'data' is unpacked.

    The expression starts with '.', the chunk the field belongs to; the
    components after it are looked up one after the other. If the last
    one is a method it is called and its return value is used.
    '''
    def __init__(self, expression):
        if not expression.startswith('.'):
            raise ValueError('\'%s\' must start with \'.\'' % expression)

        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        # '.miao'.split(".") -> ['', 'miao']
        field = instance.father

        for component_name in self.expression.split('.')[1:]:
            field = getattr(field, component_name)

        self.logger.debug(' resolved \'%s\' as %s' % (self.expression, field.__class__.__name__))

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        field = self.resolve_field(instance)

        if inspect.ismethod(field):
            return field()

        return field.value


def resolve(value, instance):
    '''Returns value itself or, if it's a Dependency, what it resolves to'''
    if isinstance(value, Dependency):
        return value.resolve(instance)

    return value
