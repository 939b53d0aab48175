import copy
import logging


logger = logging.getLogger(__name__)


class FieldDescriptor(object):
    """Gives each chunk instance its own copy of a declared field, made
    the first time the attribute is looked up; on the class it returns
    the declared field itself."""

    def __init__(self, field: "FieldBase", name: str):
        self.field = field
        self.field.name = name

    @property
    def name(self):
        return self.field.name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self.field

        # the copy lands in the instance __dict__, so next lookups don't get here
        logger.debug("creating field '%s' of %s" % (self.name, instance.__class__.__name__))
        field = instance.__dict__[self.name] = self.field.create(father=instance)

        return field


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if getattr(cls, name, None) is not None:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))
        cls._meta.fields.append(name)

    def create(self, father):
        '''Declared fields are prototypes, instances work on a deep copy'''
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """What the metaclass knows about a chunk class"""

    def __init__(self, fields=None):
        self.fields = list(fields) if fields else []

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ', '.join(self.fields))


class MetaChunk(type):
    '''Collects the fields declared in the body of a chunk class, in
    declaration order and after the ones of its bases.

        class Header(Chunk):
            id   = fields.FourCCField()
            size = fields.StructField('I')

    gives Header._meta.fields == ['id', 'size'].
    '''

    def __new__(mcs, name, bases, attrs):
        declared = [(key, value) for key, value in attrs.items() if isinstance(value, FieldBase)]
        for key, _ in declared:
            del attrs[key]

        new_cls = super().__new__(mcs, name, bases, attrs)

        inherited = []
        for base in bases:
            for field_name in getattr(base, '_meta', Meta()).fields:
                if field_name not in inherited:
                    inherited.append(field_name)

        new_cls._meta = Meta(inherited)

        for key, field in declared:
            field.contribute_to_chunk(new_cls, key)

        return new_cls
