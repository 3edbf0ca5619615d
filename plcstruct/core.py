"""
Core module for the abstraction of a record living in the controller memory

"""
from typing import Dict, List, Tuple

from . import codec
from .layout import resolve
from .meta import MetaRecord


class Record(metaclass=MetaRecord):
    """
    Main class that defines a shape: subclass it and declare the fields as
    class attributes, each one with its own order

        class Motor(Record):
            speed   = fields.ScalarField(PlcType.DINT, order=0)
            enabled = fields.ScalarField(PlcType.BOOL, order=1)
            label   = fields.StringField(order=2, max_length=16)

    The instances are plain containers of values: accessing a field from
    an instance returns its value, accessing it from the class returns
    the declaration.
    """

    def __init__(self, **kwargs):
        for field_name, field in self.get_fields():
            setattr(self, field_name, field.value_from_default())

        for name, value in kwargs.items():
            if name not in self._meta.declarations:
                raise TypeError(f"'{self.__class__.__name__}' has no field named '{name}'")

            setattr(self, name, value)

    @classmethod
    def get_ordered_fields_name(cls) -> List[str]:
        return cls._meta.fields

    @classmethod
    def get_fields(cls):
        '''It returns a list of couples (name, declaration) for each field.'''
        return cls._meta.get_fields()

    def get_values(self) -> Dict[str, object]:
        return {_: getattr(self, _) for _ in self.get_ordered_fields_name()}

    # mutable containers
    __hash__ = None

    def __eq__(self, other):
        if other.__class__ is not self.__class__:
            return NotImplemented

        return self.get_values() == other.get_values()

    def __repr__(self):
        msg = []
        for field_name, value in self.get_values().items():
            msg.append('%s=%r' % (field_name, value))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, value in self.get_values().items():
            msg += '%s: %r\n' % (field_name, value)
        return msg

    @classmethod
    def size(cls) -> int:
        return resolve(cls).total_size

    @classmethod
    def layout(cls) -> Dict[str, Tuple[int, int]]:
        result = {}
        for field_layout in resolve(cls).fields:
            result[field_layout.name] = (field_layout.offset, field_layout.size)

        return result

    def pack(self) -> bytes:
        return codec.serialize(self, self.__class__)

    @classmethod
    def unpack(cls, data: bytes) -> "Record":
        return codec.deserialize(data, cls)
