"""
Core module for the abstraction of a chunk of a file format

"""
from typing import List, Tuple

from .fields import ArrayField, Field
from .meta import MetaChunk
from .streams import Cursor, Stream
from .exceptions import (
    RiffException,
    TruncatedHeaderException,
    UnderrunException,
)
from .properties import ChunkPhase


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: a Chunk
    is an ordered sequence of fields, unpacked one after the other from
    the same cursor.

    A Chunk can contain sub-chunks.

    For each field the chunk can define a hook named on_<field name>(field, cursor)
    that is called right after the field is unpacked, before the field
    validates itself (i.e. checks its magic).

    If reading one of its own fields runs out of bytes, the exception is
    reported as the kind indicated by the 'truncated' attribute.
    """
    truncated = TruncatedHeaderException

    def __init__(self, source=None, **kwargs):
        super().__init__(**kwargs)

        if source is None:
            return

        if isinstance(source, Cursor):
            self.unpack(source)
            return

        with Stream(source) as stream:
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream.obj))
            self.unpack(stream.cursor())

    def init(self):
        pass

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

    def iter_unpack(self, cursor):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        It yields each field once unpacked; fields that are arrays yield each
        of their elements instead, so that a caller can show the content of a
        file while it's parsed.

        Any error stops the unpacking: the name of the field is added to the
        chain of the exception and the exception propagates.
        '''
        self._phase = ChunkPhase.UNPACKING
        self.offset = cursor.position

        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s at offset %d' % (self.__class__.__name__, field_name, cursor.position))

            try:
                bound = field.get_bound()
                target = cursor.sub(bound) if bound is not None else cursor

                if isinstance(field, ArrayField):
                    yield from field.iter_unpack(target)
                else:
                    field.unpack(target)

                hook = getattr(self, 'on_%s' % field_name, None)
                if hook:
                    hook(field, cursor)

                field.validate()
            except RiffException as e:
                self._phase = ChunkPhase.ERROR
                if type(e) is UnderrunException:
                    e = self.truncated.from_underrun(e)
                e.chain.append(field_name)
                raise e

            if not isinstance(field, ArrayField):
                yield field

        self._phase = ChunkPhase.DONE

    def unpack(self, cursor):
        for _ in self.iter_unpack(cursor):
            pass

        return self
