"""
# plcstruct: records as the controller sees them.

An industrial controller stores structured variables in its memory with a
fixed layout: every member has its own offset and size, determined by the
order of declaration and by the alignment rules of the controller.

Three operations are defined here:

 1. resolve(): compute the layout of a shape, i.e. the offsets and the sizes
    of its fields. A shape is a Record subclass or a primitive PlcType.
    The layout is computed once and cached.

 2. serialize()/deserialize(): encode a value into the exact bytes the
    controller expects and build back a value from them.

 3. read_chunked()/write_chunked(): move the bytes from/to the controller
    across a channel accepting only commands of bounded size, splitting
    the transfer in chunks (see ChunkPlanner).

The three are independent: the chunked transfers work on raw bytes and
the transport itself is provided by the caller as plain functions.
"""
from .codec import deserialize, serialize
from .core import Record
from .enum import PlcType
from .exceptions import (
    AddressFormatException,
    BufferException,
    PackException,
    PlcStructException,
    ShapeException,
    TransferException,
)
from .layout import (
    FieldLayout,
    LayoutTable,
    clear_layout_cache,
    describe,
    get_size,
    resolve,
    validate,
)
from .transfer import ChunkOptions, ChunkPlanner, calculate_offset_address
