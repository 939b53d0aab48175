"""
A Field is "fundamental" datatype from the format point of view, something directly
unpackable from a cursor without knowing what surrounds it.
"""
import logging
from enum import Flag, auto

from .enum import Compliant
from .meta import FieldBase
from .properties import ChunkPhase, resolve
from .exceptions import MagicException, RiffException, SizeOverflowException
from .utils import escape


class Field(FieldBase):
    """Base class to subclass from.

    If 'bound' is given (an int or a Dependency) the field is unpacked from
    a sub-cursor of exactly that many bytes, and the enclosing cursor moves
    past all of them whatever the field consumes."""

    def __init__(self, name=None, father=None, default=None, bound=None, compliant=Compliant.INHERIT):
        super().__init__()
        self._phase = ChunkPhase.INIT
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.bound = bound
        self.offset = None
        self.index = None
        self.compliant = compliant

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def is_compliant(self, level):
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                break

            instance = instance.father

        return False

    def get_bound(self):
        return resolve(self.bound, self)

    def validate(self):
        '''Called once the enclosing chunk has run its own hook for this field'''
        pass

    def unpack(self, cursor):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module unpacking
    little endian integers from bytes, the only byte order there is in RIFF.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def get_format(self):
        return '<%s' % self.format

    def unpack(self, cursor):
        self.offset = cursor.position
        self.value = cursor.read_struct(self.get_format())


class SizeField(StructField):
    """A 32 bit length that must fit in what is left of the cursor it
    is read from. The check happens before any byte it covers is touched."""

    def __init__(self, overflow=SizeOverflowException, what='size', **kw):
        self.overflow = overflow
        self.what = what
        super().__init__('I', **kw)

    def unpack(self, cursor):
        super().unpack(cursor)

        if self.value > cursor.remaining():
            raise self.overflow(self.value, cursor.remaining(), what=self.what)


class StringField(Field):
    """Represent a contiguous chunk of bytes."""

    def __init__(self, n=None, is_magic=False, exception=MagicException, **kw):
        if n is None and kw.get('default') is None:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.n = n if n is not None else len(kw['default'])
        self.is_magic = is_magic
        self.exception = exception

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    @property
    def length(self):
        return resolve(self.n, self)

    def __len__(self):
        return len(self.value)

    def value_from_default(self):
        return self.default if self.default is not None else b''

    def unpack(self, cursor):
        self.offset = cursor.position
        self.value = bytes(cursor.read(self.length))

    def validate(self):
        if not self.is_magic or self.value == self.default:
            return

        self.logger.warning('the magic doesn\'t correspond: %r instead of %r' % (self.value, self.default))
        if self.is_compliant(Compliant.MAGIC):
            raise self.exception(self.default, self.value)


class FourCCField(StringField):
    """The four bytes identifier that starts every chunk."""

    def __init__(self, **kw):
        super().__init__(n=4, **kw)

    def __str__(self):
        return escape(self.value)


class TextField(Field):
    """Takes all that is left in the cursor as text."""

    def value_from_default(self):
        return b''

    def __str__(self):
        return escape(self.value)

    def unpack(self, cursor):
        self.offset = cursor.position
        self.value = bytes(cursor.read(cursor.remaining()))


class OpaqueField(Field):
    """Skips all that is left in the cursor without looking at it."""

    def value_from_default(self):
        return 0

    def __str__(self):
        return '...'

    def unpack(self, cursor):
        self.offset = cursor.position
        self.value = cursor.remaining()
        cursor.skip(self.value)


class PaddingField(Field):
    '''Takes as many NUL bytes as there are at the cursor'''

    def value_from_default(self):
        return 0

    def __str__(self):
        return '\\0' * self.value

    def unpack(self, cursor):
        self.offset = cursor.position
        self.value = 0
        while cursor.remaining() > 0 and cursor.peek(1)[0] == 0:
            cursor.skip(1)
            self.value += 1


class ArrayField(Field):
    '''Unpack an array of Chunks until the cursor is exhausted.

    It behaves like a list in python, at least for reading.
    '''

    def __init__(self, field_cls, **kw):
        self.field_cls = field_cls
        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        return list(self.default) if self.default else []

    def instance_element(self):
        return self.field_cls.create(father=self)  # pass the father so that we don't lose the hierarchy

    def iter_unpack(self, cursor):
        '''Yields each element as soon as it is unpacked'''
        self._phase = ChunkPhase.UNPACKING
        self.offset = cursor.position
        self.value = []

        while cursor.remaining() > 0:
            element = self.instance_element()
            element.index = len(self.value)
            self.logger.debug('unpacking %s[%d] at offset %d' % (self.name, element.index, cursor.position))

            try:
                element.unpack(cursor)
            except RiffException as e:
                self._phase = ChunkPhase.ERROR
                e.chain.append(str(element.index))
                raise

            self.value.append(element)
            yield element

        self._phase = ChunkPhase.DONE

    def unpack(self, cursor):
        for _ in self.iter_unpack(cursor):
            pass


class SelectField(Field):
    """Allow to select the kind of final field based on condition in the parent chunk.
    You need to pass the name of the field to use as key and a dictionary with the mapping
    between key and (field class, args, kwargs). You can use Type.DEFAULT as a default.

    If the name refers to a method of the parent it is called with the cursor
    the field is going to be unpacked from, and its return value is the key.

        type2field = {
            b'INFO': (fields.ArrayField, (InfoField(),), {}),
            SelectField.Type.DEFAULT: (fields.OpaqueField, (), {}),
        }

        class ListChunk(Chunk):
            list_type = fields.FourCCField()
            entries = fields.SelectField('list_type', type2field)
    """
    class Type(Flag):
        DEFAULT = auto()

    def __init__(self, key, mapping, *args, **kwargs):
        self._key = key
        self._mapping = mapping
        self._field = None

        super().__init__(*args, **kwargs)

    def __repr__(self):
        return f'<{self.__class__.__name__}{self._field!r}>'

    def __str__(self):
        return str(self._field)

    @property
    def field(self):
        return self._field

    def value_from_default(self):
        return None

    @property
    def value(self):
        return self._field.value if self._field is not None else None

    @value.setter
    def value(self, value):
        if self._field is not None:
            self._field.value = value

    def resolve_key(self, cursor):
        self.logger.debug('resolving key \'%s\'' % self._key)
        field_key = getattr(self.father, self._key)

        value = field_key(cursor) if callable(field_key) else field_key.value

        return value if value in self._mapping else SelectField.Type.DEFAULT

    def unpack(self, cursor):
        key = self.resolve_key(cursor)

        self.logger.debug('using key \'%s\'' % (key,))

        field_class, args, kwargs = self._mapping[key]
        self._field = field_class(*args, **kwargs)
        self._field.father = self
        self._field.name = self.name

        self._field.unpack(cursor)
        self.offset = self._field.offset
        self.logger.debug(f'unpacked {self._field!r}')
