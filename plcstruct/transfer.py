"""
Chunked transfers of raw bytes.

The channel toward the controller accepts only commands of bounded size so
that reading or writing a big area of memory must be split in sub-operations,
each one addressing its own part of the area. The actual exchange with the
controller is done by the functions passed by the caller, here we only care
about splitting, addressing and reassembling.

An address is the textual token used by the transport, made of five
comma-separated integers, like

    1,0,0,0,80

where the 4th component (index 3) is the byte offset and the last one is a
size hint we don't touch.
"""
import logging
import re
from typing import Callable, List, NamedTuple, Tuple

from .exceptions import AddressFormatException, TransferException


logger = logging.getLogger(__name__)

OFFSET_COMPONENT = 3
# plain ASCII digits, no whitespace or underscores
OFFSET_PATTERN = re.compile(r'-?[0-9]+')


def calculate_offset_address(base_address: str, byte_offset: int) -> str:
    '''Returns the address that is "byte_offset" bytes after "base_address".'''
    if byte_offset == 0:
        return base_address

    parts = base_address.split(',')

    if len(parts) <= OFFSET_COMPONENT:
        raise AddressFormatException(f'cannot calculate offset address, unknown address format: {base_address!r}')

    if not OFFSET_PATTERN.fullmatch(parts[OFFSET_COMPONENT]):
        raise AddressFormatException(f'cannot parse byte offset from address: {base_address!r}')

    current_offset = int(parts[OFFSET_COMPONENT])

    parts[OFFSET_COMPONENT] = str(current_offset + byte_offset)

    return ','.join(parts)


class ChunkOptions(NamedTuple):
    '''How the orchestration layer wants the chunk size to be chosen: a positive
    override fixes it, otherwise it's detected unless the detection is skipped.'''
    max_chunk_size_override: int = 0
    skip_chunk_detection: bool = False


class ChunkPlanner(object):
    '''Split reads and writes in chunks not bigger than "max_chunk_size".'''

    DEFAULT_CHUNK_SIZE = 512
    MIN_CHUNK_SIZE = 256
    MAX_DETECTION_CHUNK_SIZE = 4096
    DETECTION_CANDIDATES = (256, 512, 1024, 2048, 4096)

    calculate_offset_address = staticmethod(calculate_offset_address)

    def __init__(self, max_chunk_size=None):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.max_chunk_size = self.DEFAULT_CHUNK_SIZE
        self.was_auto_detected = False

        if max_chunk_size is not None:
            self.set_fixed_chunk_size(max_chunk_size)

    def __repr__(self):
        return '<%s(max_chunk_size=%d, auto_detected=%s)>' % (
            self.__class__.__name__,
            self.max_chunk_size,
            self.was_auto_detected,
        )

    def set_fixed_chunk_size(self, size: int) -> None:
        if not isinstance(size, int) or isinstance(size, bool):
            raise ValueError(f'chunk size must be an integer, not {size!r}')

        if size < self.MIN_CHUNK_SIZE:
            raise ValueError(f'chunk size must be at least {self.MIN_CHUNK_SIZE} bytes, not {size}')

        self.max_chunk_size = size
        self.was_auto_detected = False

    def detect_max_chunk_size(self, try_chunk_size: Callable[[int], bool]) -> int:
        '''Probe the candidates in increasing order and keep the last one that
        worked: the probing stops at the first failure, an exception raised by
        the probe counts as a failure.'''
        last_good = self.MIN_CHUNK_SIZE

        for size in self.DETECTION_CANDIDATES:
            try:
                works = try_chunk_size(size)
            except Exception as e:
                self.logger.debug('probing chunk size %d raised %r', size, e)
                break

            if not works:
                self.logger.debug('probing chunk size %d failed', size)
                break

            last_good = size

        self.logger.debug('detected max chunk size of %d bytes', last_good)

        self.max_chunk_size = last_good
        self.was_auto_detected = True

        return last_good

    def configure(self, options: ChunkOptions, try_chunk_size: Callable[[int], bool] = None) -> None:
        if options.max_chunk_size_override > 0:
            self.set_fixed_chunk_size(options.max_chunk_size_override)
        elif not options.skip_chunk_detection and try_chunk_size is not None:
            self.detect_max_chunk_size(try_chunk_size)

    def calculate_chunk_count(self, total_size: int) -> int:
        if total_size <= self.max_chunk_size:
            return 1

        return (total_size + self.max_chunk_size - 1) // self.max_chunk_size

    def plan(self, base_address: str, total_size: int) -> List[Tuple[str, int, int]]:
        '''Returns the triples (address, offset, size) of the chunks in increasing offset order.

        All the addresses are computed before any transfer starts so that a malformed
        address doesn't leave a transfer half done.'''
        chunks = []
        offset = 0
        while offset < total_size:
            size = min(self.max_chunk_size, total_size - offset)
            chunks.append((calculate_offset_address(base_address, offset), offset, size))
            offset += size

        return chunks

    def _read_chunk(self, read_fn, address: str, offset: int, size: int) -> bytes:
        chunk = read_fn(address, size)

        if chunk is None or (size > 0 and len(chunk) == 0):
            raise TransferException(f'failed to read chunk at offset {offset}: no data')

        if len(chunk) < size:
            raise TransferException(
                f'failed to read chunk at offset {offset}: expected {size} bytes, got {len(chunk)}')

        return bytes(chunk[:size])

    def read_chunked(self, base_address: str, total_size: int, read_fn: Callable[[str, int], bytes]) -> bytes:
        if total_size <= self.max_chunk_size:
            return self._read_chunk(read_fn, base_address, 0, total_size)

        chunks = self.plan(base_address, total_size)
        self.logger.debug('reading %d bytes from %s in %d chunks', total_size, base_address, len(chunks))

        result = bytearray()
        for address, offset, size in chunks:
            result += self._read_chunk(read_fn, address, offset, size)

        return bytes(result)

    def write_chunked(self, base_address: str, data: bytes, write_fn: Callable[[str, bytes], None]) -> None:
        if len(data) <= self.max_chunk_size:
            write_fn(base_address, bytes(data))
            return

        chunks = self.plan(base_address, len(data))
        self.logger.debug('writing %d bytes to %s in %d chunks', len(data), base_address, len(chunks))

        for address, offset, size in chunks:
            write_fn(address, bytes(data[offset:offset + size]))
