import struct
from enum import Enum


class PlcType(Enum):
    '''Data types understood by the controller.

    The value of the primitive members is the struct format character
    used to encode them; the composite ones have no direct encoding.'''
    BOOL   = '?'
    SINT   = 'b'
    USINT  = 'B'
    INT    = 'h'
    UINT   = 'H'
    DINT   = 'i'
    UDINT  = 'I'
    LINT   = 'q'
    ULINT  = 'Q'
    REAL   = 'f'
    LREAL  = 'd'
    STRING = 'string'
    STRUCT = 'struct'
    ARRAY  = 'array'

    @property
    def is_primitive(self) -> bool:
        return len(self.value) == 1

    @property
    def is_integer(self) -> bool:
        return self.is_primitive and self.value in 'bBhHiIqQ'

    def get_format(self) -> str:
        '''The controller stores everything little endian.'''
        if not self.is_primitive:
            raise ValueError(f'{self.name} has no direct binary encoding')

        return '<%s' % self.value

    @property
    def size(self) -> int:
        return struct.calcsize(self.get_format())

    @property
    def alignment(self) -> int:
        if not self.is_primitive:
            return 4

        # the controller aligns 8-byte values to its word, not to their width
        return min(self.size, 4)
