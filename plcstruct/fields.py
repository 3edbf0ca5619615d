"""
A Field is the declaration of a member of a Record: it knows how much room
its value needs in the controller memory, how it must be aligned and how
to pack/unpack that value to/from a buffer.

Each field carries an "order" that fixes its position in the layout; fields
without an order are kept in the record but don't take part in the layout.
"""
import logging
from enum import Enum

from . import codec
from .enum import PlcType
from .exceptions import PackException, ShapeException
from .layout import FieldLayout, resolve
from .meta import FieldBase, MetaRecord


class Field(FieldBase):
    """Base class to subclass from"""

    kind = None

    def __init__(self, order=None, default=None):
        super().__init__()
        if order is not None and (not isinstance(order, int) or order < 0):
            raise ValueError(f'order must be a non-negative integer, not {order!r}')

        self.logger = logging.getLogger(__name__)
        self.name = None
        self.order = order
        self.default = default

    def __repr__(self):
        return '<%s(name=%s, order=%s)>' % (self.__class__.__name__, self.name, self.order)

    def get_alignment(self) -> int:
        return 4

    def get_size(self, owner=None) -> int:
        raise ShapeException(
            f"cannot determine size of field '{self.name}' of kind {self.__class__.__name__}",
            shape=owner, member=self.name)

    def get_type_name(self, field_layout=None) -> str:
        return self.kind.name

    def build_layout(self, owner, offset: int) -> FieldLayout:
        return FieldLayout(
            name=self.name,
            order=self.order,
            offset=offset,
            size=self.get_size(owner),
            kind=self.kind,
            field=self,
        )

    def pack_into(self, buffer: bytearray, offset: int, size: int, value) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}.pack_into() not implemented")

    def unpack_from(self, data: bytes, offset: int, size: int):
        raise NotImplementedError(f"method {self.__class__.__name__}.unpack_from() not implemented")


class ScalarField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    a primitive of the controller to/from bytes.
    """

    def __init__(self, plc_type: PlcType, order=None, default=None):
        if not isinstance(plc_type, PlcType) or not plc_type.is_primitive:
            raise ValueError(f'{plc_type!r} is not a primitive type')

        self.kind = plc_type
        super().__init__(order=order, default=default)

    def value_from_default(self):
        if self.default is not None:
            return self.default

        if self.kind == PlcType.BOOL:
            return False

        return 0 if self.kind.is_integer else 0.0

    def get_alignment(self):
        return self.kind.alignment

    def get_size(self, owner=None):
        return self.kind.size

    def pack_into(self, buffer, offset, size, value):
        codec.pack_primitive(buffer, offset, self.kind, value)

    def unpack_from(self, data, offset, size):
        return codec.unpack_primitive(data, offset, self.kind)


class EnumField(ScalarField):
    """Integer field whose value is represented by a member of the enum.Enum
    subclass passed as argument. The integer type backing it can be
    overridden via "plc_type", by default it's a DINT."""

    def __init__(self, enum, order=None, plc_type=PlcType.DINT, default=None):
        if not isinstance(plc_type, PlcType) or not plc_type.is_integer:
            raise ValueError(f'an enum must be backed by an integer type, not {plc_type!r}')

        self.enum = enum
        super().__init__(plc_type, order=order, default=default)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.enum.__name__}, name={self.name}, order={self.order})>'

    def value_from_default(self):
        if self.default is None:
            return next(iter(self.enum))

        return self.default if isinstance(self.default, self.enum) else self.enum(self.default)

    def get_type_name(self, field_layout=None):
        return self.enum.__name__

    def pack_into(self, buffer, offset, size, value):
        super().pack_into(buffer, offset, size, value.value if isinstance(value, Enum) else value)

    def unpack_from(self, data, offset, size):
        value = super().unpack_from(data, offset, size)
        try:
            return self.enum(value)
        except ValueError:
            self.logger.warning(f'enum {self.enum!r} doesn\'t have element with value 0x{value:x} in it')

        return value


class StringField(Field):
    """UTF-8 text in a reserved area of "max_length" bytes, padded with zeros.

    Values too long for the area are truncated, not refused."""

    kind = PlcType.STRING

    def __init__(self, order=None, max_length=None, default=''):
        if max_length is not None and (not isinstance(max_length, int) or max_length <= 0):
            raise ValueError(f'max_length must be a positive integer, not {max_length!r}')

        self.max_length = max_length
        super().__init__(order=order, default=default)

    def get_type_name(self, field_layout=None):
        return f'STRING({self.max_length})'

    def get_size(self, owner=None):
        if self.max_length is None:
            raise ShapeException(
                f"string field '{self.name}' requires a max_length",
                shape=owner, member=self.name)

        return self.max_length

    def build_layout(self, owner, offset):
        return super().build_layout(owner, offset)._replace(string_max_length=self.get_size(owner))

    def pack_into(self, buffer, offset, size, value):
        if not value:
            return

        raw = value.encode('utf-8')
        if len(raw) > size:
            self.logger.debug('truncating %d bytes of \'%s\' to %d', len(raw), self.name, size)
            raw = raw[:size]

        buffer[offset:offset + len(raw)] = raw

    def unpack_from(self, data, offset, size):
        raw = bytes(data[offset:offset + size])
        end = raw.find(b'\x00')
        if end >= 0:
            raw = raw[:end]

        # a truncation can split a multi-byte character
        return raw.decode('utf-8', errors='replace')


class NestedField(Field):
    """Embed another Record, its layout is resolved on its own and placed
    as a single block inside the father."""

    kind = PlcType.STRUCT

    def __init__(self, record_cls, order=None, default=None):
        self.record_cls = record_cls
        super().__init__(order=order, default=default)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.record_cls.__name__}, name={self.name}, order={self.order})>'

    def value_from_default(self):
        if self.default is None and isinstance(self.record_cls, MetaRecord):
            return self.record_cls()

        return super().value_from_default()

    def get_type_name(self, field_layout=None):
        return self.record_cls.__name__

    def get_size(self, owner=None):
        return resolve(self.record_cls).total_size

    def build_layout(self, owner, offset):
        nested = resolve(self.record_cls)
        return super().build_layout(owner, offset)._replace(nested=nested)

    def pack_into(self, buffer, offset, size, value):
        if value is None:
            return

        codec.pack_into(buffer, offset, value, self.record_cls)

    def unpack_from(self, data, offset, size):
        return codec.unpack_from(data, offset, self.record_cls)


def as_field(element) -> Field:
    '''It allows to indicate the element of an array with a primitive type
    or a record class instead of a complete field declaration.'''
    if isinstance(element, Field):
        return element

    if isinstance(element, PlcType):
        return ScalarField(element)

    if isinstance(element, MetaRecord):
        return NestedField(element)

    raise ValueError(f'{element!r} cannot be used as a field')


class ArrayField(Field):
    '''Un/Pack a fixed number of elements of the same field.

    You can indicate an explicit number of elements via the parameter named "length",
    otherwise it's inferred from the default value of a default-constructed instance
    of the record the field belongs to.

    On packing, missing elements leave their area zeroed and exceeding ones are ignored;
    on unpacking you obtain always a list with the declared number of elements.
    '''

    kind = PlcType.ARRAY

    def __init__(self, element, order=None, length=None, default=None):
        if length is not None and (not isinstance(length, int) or length <= 0):
            raise ValueError(f'length must be a positive integer, not {length!r}')

        self.element = as_field(element)
        self.length = length
        super().__init__(order=order, default=default)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.element!r}, name={self.name}, order={self.order})>'

    def value_from_default(self):
        if self.default is None:
            return [self.element.value_from_default() for _ in range(self.length or 0)]

        return super().value_from_default()

    def get_type_name(self, field_layout=None):
        '''C order: the outermost length comes first, three INT[2] give INT[3][2].'''
        length = field_layout.array_length if field_layout is not None else self.length
        element_name = self.element.get_type_name()

        if isinstance(self.element, ArrayField):
            head, bracket, tail = element_name.partition('[')
            return f'{head}[{length}]{bracket}{tail}'

        return f'{element_name}[{length}]'

    def get_length(self, owner=None) -> int:
        if self.length is not None:
            return self.length

        if owner is None:
            raise ShapeException(
                f"cannot determine array length for field '{self.name}': indicate it with 'length'",
                member=self.name)

        try:
            value = getattr(owner(), self.name)
            length = len(value)
        except Exception as e:
            raise ShapeException(
                f"cannot determine array length for field '{self.name}' in '{owner.__name__}': "
                "indicate it with 'length' or give the field a default",
                shape=owner, member=self.name) from e

        if length == 0:
            raise ShapeException(
                f"array field '{self.name}' in '{owner.__name__}' has no elements",
                shape=owner, member=self.name)

        return length

    def get_size(self, owner=None):
        return self.element.get_size() * self.get_length(owner)

    def build_layout(self, owner, offset):
        length = self.get_length(owner)
        field_layout = FieldLayout(
            name=self.name,
            order=self.order,
            offset=offset,
            size=self.element.get_size() * length,
            kind=self.kind,
            field=self,
            array_length=length,
        )

        if isinstance(self.element, NestedField):
            field_layout = field_layout._replace(nested=resolve(self.element.record_cls))
        elif isinstance(self.element, StringField):
            field_layout = field_layout._replace(string_max_length=self.element.get_size())

        return field_layout

    def pack_into(self, buffer, offset, size, value):
        if value is None:
            return

        stride = self.element.get_size()
        length = size // stride

        if len(value) > length:
            self.logger.debug('ignoring %d elements exceeding the length of \'%s\'', len(value) - length, self.name)

        for index, element in enumerate(value[:length]):
            if element is None:
                continue

            try:
                self.element.pack_into(buffer, offset + index * stride, stride, element)
            except PackException as e:
                e.chain.append(str(index))
                raise

    def unpack_from(self, data, offset, size):
        stride = self.element.get_size()

        return [
            self.element.unpack_from(data, offset + index * stride, stride)
            for index in range(size // stride)
        ]
