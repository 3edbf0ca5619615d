"""
Translation between values and the binary representation the controller
uses in its memory.

Everything is little endian independently from the host, the buffer is
zero-initialized so that missing values (None) and the padding between
fields are left at zero.
"""
import logging
import struct

from .enum import PlcType
from .exceptions import BufferException, PackException
from .layout import get_shape_name, resolve


logger = logging.getLogger(__name__)


def pack_primitive(buffer: bytearray, offset: int, plc_type: PlcType, value) -> None:
    try:
        struct.pack_into(plc_type.get_format(), buffer, offset, value)
    except (struct.error, OverflowError) as e:
        raise PackException(f'cannot pack {value!r} as {plc_type.name}: {e}') from e


def unpack_primitive(data: bytes, offset: int, plc_type: PlcType):
    return struct.unpack_from(plc_type.get_format(), data, offset)[0]


def pack_into(buffer: bytearray, offset: int, value, shape) -> None:
    '''Write the value at the given offset of the buffer, the buffer must
    have room for the whole layout of the shape.'''
    layout = resolve(shape)

    if value is None:
        return

    if layout.is_primitive:
        pack_primitive(buffer, offset, shape, value)
        return

    for field_layout in layout.fields:
        field_value = getattr(value, field_layout.name)
        if field_value is None:
            continue

        logger.debug('packing %s.%s at offset %d', get_shape_name(shape), field_layout.name, offset + field_layout.offset)

        try:
            field_layout.field.pack_into(buffer, offset + field_layout.offset, field_layout.size, field_value)
        except PackException as e:
            e.chain.append(field_layout.name)
            raise


def unpack_from(data: bytes, offset: int, shape):
    layout = resolve(shape)

    if layout.is_primitive:
        return unpack_primitive(data, offset, shape)

    instance = shape()
    for field_layout in layout.fields:
        logger.debug('unpacking %s.%s at offset %d', get_shape_name(shape), field_layout.name, offset + field_layout.offset)
        value = field_layout.field.unpack_from(data, offset + field_layout.offset, field_layout.size)
        setattr(instance, field_layout.name, value)

    return instance


def serialize(value, shape) -> bytes:
    '''Returns exactly get_size(shape) bytes representing the value.'''
    buffer = bytearray(resolve(shape).total_size)

    pack_into(buffer, 0, value, shape)

    return bytes(buffer)


def deserialize(data: bytes, shape):
    '''Builds a value of the shape from the data; bytes exceeding the size
    of the shape are ignored.'''
    layout = resolve(shape)

    if len(data) < layout.total_size:
        raise BufferException(
            f'buffer too small to deserialize {get_shape_name(shape)}: '
            f'expected {layout.total_size} bytes, got {len(data)}')

    return unpack_from(data, 0, shape)
