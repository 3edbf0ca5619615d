"""
Resolution of the layout of a shape, i.e. where each field of a record lives
inside the memory of the controller.

A shape is a Record subclass or a primitive PlcType. The controller uses the
following alignment rules:

 1. 1 byte for BOOL, SINT and USINT
 2. 2 bytes for INT and UINT
 3. 4 bytes for everything else, included the 8-byte types (the alignment
    follows the word of the controller, not the width of the value)

and the total size of a record is always padded to a multiple of 4 bytes.

The layouts are computed once per shape and cached for the life of the process;
clear_layout_cache() is the only way to get rid of them.
"""
import logging
from functools import lru_cache
from itertools import groupby
from typing import NamedTuple, Optional, Tuple

from .enum import PlcType
from .exceptions import ShapeException
from .meta import MetaRecord


logger = logging.getLogger(__name__)

RECORD_ALIGNMENT = 4


class FieldLayout(NamedTuple):
    name: str
    order: int
    offset: int
    size: int
    kind: PlcType
    field: object
    nested: Optional["LayoutTable"] = None
    array_length: Optional[int] = None
    string_max_length: Optional[int] = None


class LayoutTable(NamedTuple):
    shape: object
    total_size: int
    fields: Tuple[FieldLayout, ...] = ()

    @property
    def is_primitive(self) -> bool:
        return not self.fields

    def get_field(self, name: str) -> FieldLayout:
        for field_layout in self.fields:
            if field_layout.name == name:
                return field_layout

        raise KeyError(name)


def align(offset: int, alignment: int) -> int:
    if alignment > 1 and offset % alignment:
        offset += alignment - offset % alignment

    return offset


def get_shape_name(shape) -> str:
    if isinstance(shape, PlcType):
        return shape.name

    return getattr(shape, '__name__', repr(shape))


def _get_ordered_fields(shape):
    ordered = [(name, field) for name, field in shape._meta.get_fields() if field.order is not None]

    if not ordered:
        raise ShapeException(
            f"record '{shape.__name__}' has no fields with an order: "
            "indicate 'order' on the fields to define the layout",
            shape=shape)

    ordered.sort(key=lambda _: _[1].order)

    for order, group in groupby(ordered, key=lambda _: _[1].order):
        names = [name for name, _ in group]
        if len(names) > 1:
            raise ShapeException(
                f"record '{shape.__name__}' has duplicate order {order} on fields: {', '.join(names)}",
                shape=shape, member=names[1])

    return ordered


@lru_cache(maxsize=None)
def _resolve(shape) -> LayoutTable:
    if isinstance(shape, PlcType):
        if not shape.is_primitive:
            raise ShapeException(f'{shape.name} is not a complete shape', shape=shape)

        return LayoutTable(shape=shape, total_size=shape.size)

    if not isinstance(shape, MetaRecord):
        raise ShapeException(f'cannot determine the layout of {shape!r}', shape=shape)

    logger.debug('resolving layout of \'%s\'', shape.__name__)

    offset = 0
    fields = []
    for name, field in _get_ordered_fields(shape):
        offset = align(offset, field.get_alignment())

        field_layout = field.build_layout(shape, offset)
        logger.debug(' field %s.%s at offset %d (%d bytes)', shape.__name__, name, offset, field_layout.size)

        fields.append(field_layout)
        offset += field_layout.size

    return LayoutTable(shape=shape, total_size=align(offset, RECORD_ALIGNMENT), fields=tuple(fields))


def resolve(shape) -> LayoutTable:
    '''Returns the (cached) layout for the shape passed as argument.'''
    try:
        hash(shape)
    except TypeError as e:
        raise ShapeException(f'cannot determine the layout of {shape!r}', shape=shape) from e

    return _resolve(shape)


def get_size(shape) -> int:
    return resolve(shape).total_size


def clear_layout_cache() -> None:
    _resolve.cache_clear()


def validate(shape) -> Optional[str]:
    '''Returns None if the shape can be resolved, otherwise the reason why not.'''
    try:
        resolve(shape)
    except ShapeException as e:
        return str(e)

    return None


def describe(shape, max_chunk_size: Optional[int] = None) -> str:
    '''Human readable description of the layout of a shape; passing a chunk
    size each field reports the chunk it starts in.'''
    if max_chunk_size is not None and max_chunk_size <= 0:
        raise ValueError(f'the chunk size must be positive, not {max_chunk_size}')

    layout = resolve(shape)

    header = f'{get_shape_name(shape)} (total: {layout.total_size} bytes'
    if max_chunk_size is not None and layout.total_size > max_chunk_size:
        chunks = (layout.total_size + max_chunk_size - 1) // max_chunk_size
        header += f', {chunks} chunks @ {max_chunk_size} bytes'
    header += ')'

    lines = [header]
    for field_layout in layout.fields:
        type_name = field_layout.field.get_type_name(field_layout)
        line = f'  Offset {field_layout.offset}: {field_layout.name} ({type_name}, {field_layout.size} bytes)'

        if max_chunk_size is not None:
            line += f' [Chunk {field_layout.offset // max_chunk_size + 1}]'

        lines.append(line)

    return '\n'.join(lines)
