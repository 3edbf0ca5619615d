from enum import Enum

import pytest

from plcstruct import fields
from plcstruct.enum import PlcType


class Color(Enum):
    RED = 1
    GREEN = 2


def test_scalarfield():
    field = fields.ScalarField(PlcType.UINT, order=3)

    assert field.order == 3
    assert field.kind == PlcType.UINT
    assert field.get_size() == 2
    assert field.get_alignment() == 2
    assert field.value_from_default() == 0

    buffer = bytearray(4)
    field.pack_into(buffer, 2, 2, 0xcafe)

    assert buffer == b'\x00\x00\xfe\xca'
    assert field.unpack_from(buffer, 2, 2) == 0xcafe


def test_scalarfield_defaults():
    assert fields.ScalarField(PlcType.BOOL).value_from_default() is False
    assert fields.ScalarField(PlcType.REAL).value_from_default() == 0.0
    assert isinstance(fields.ScalarField(PlcType.LREAL).value_from_default(), float)
    assert fields.ScalarField(PlcType.DINT, default=10).value_from_default() == 10


def test_scalarfield_wrong_type():
    with pytest.raises(ValueError):
        fields.ScalarField(PlcType.STRING)

    with pytest.raises(ValueError):
        fields.ScalarField('I')


def test_order_must_be_non_negative():
    with pytest.raises(ValueError):
        fields.ScalarField(PlcType.DINT, order=-1)

    with pytest.raises(ValueError):
        fields.StringField(order='first', max_length=4)


def test_enumfield():
    field = fields.EnumField(Color, plc_type=PlcType.USINT)

    assert field.get_size() == 1
    assert field.value_from_default() is Color.RED
    assert field.get_type_name() == 'Color'

    buffer = bytearray(1)
    field.pack_into(buffer, 0, 1, Color.GREEN)

    assert buffer == b'\x02'
    assert field.unpack_from(buffer, 0, 1) is Color.GREEN


def test_enumfield_default():
    assert fields.EnumField(Color, default=2).value_from_default() is Color.GREEN
    assert fields.EnumField(Color, default=Color.GREEN).value_from_default() is Color.GREEN


def test_enumfield_needs_integer_backing():
    with pytest.raises(ValueError):
        fields.EnumField(Color, plc_type=PlcType.REAL)

    with pytest.raises(ValueError):
        fields.EnumField(Color, plc_type=PlcType.BOOL)


def test_stringfield():
    field = fields.StringField(max_length=8)

    assert field.get_size() == 8
    assert field.value_from_default() == ''

    buffer = bytearray(b'\xff' * 10)
    buffer[1:9] = b'\x00' * 8
    field.pack_into(buffer, 1, 8, 'kebab')

    assert buffer == b'\xffkebab\x00\x00\x00\xff'
    assert field.unpack_from(buffer, 1, 8) == 'kebab'


def test_stringfield_invalid_length():
    with pytest.raises(ValueError):
        fields.StringField(max_length=0)

    with pytest.raises(ValueError):
        fields.StringField(max_length=-5)


def test_stringfield_split_character():
    field = fields.StringField(max_length=3)

    buffer = bytearray(3)
    field.pack_into(buffer, 0, 3, 'aàb')  # 'à' takes 2 bytes

    assert buffer == 'aà'.encode('utf-8')
    assert field.unpack_from(buffer, 0, 3) == 'aà'

    buffer = bytearray(3)
    field.pack_into(buffer, 0, 3, 'abà')

    assert field.unpack_from(buffer, 0, 3) == 'ab\ufffd'


def test_arrayfield():
    field = fields.ArrayField(PlcType.DINT, length=4)

    assert isinstance(field.element, fields.ScalarField)
    assert field.get_size() == 16
    assert field.get_type_name() == 'DINT[4]'

    default = field.value_from_default()
    assert default == [0, 0, 0, 0]

    buffer = bytearray(16)
    field.pack_into(buffer, 0, 16, [1, 2])

    assert field.unpack_from(buffer, 0, 16) == [1, 2, 0, 0]


def test_arrayfield_invalid_length():
    with pytest.raises(ValueError):
        fields.ArrayField(PlcType.DINT, length=0)


def test_arrayfield_invalid_element():
    with pytest.raises(ValueError):
        fields.ArrayField(int, length=2)


def test_arrayfield_of_arrays():
    field = fields.ArrayField(fields.ArrayField(PlcType.INT, length=2), length=3)

    assert field.get_size() == 12
    assert field.get_type_name() == 'INT[3][2]'
    assert fields.ArrayField(field, length=4).get_type_name() == 'INT[4][3][2]'
    assert fields.ArrayField(fields.ArrayField(fields.StringField(max_length=5), length=2), length=3).get_type_name() == 'STRING(5)[3][2]'

    buffer = bytearray(12)
    field.pack_into(buffer, 0, 12, [[1, 2], [3], [5, 6]])

    assert field.unpack_from(buffer, 0, 12) == [[1, 2], [3, 0], [5, 6]]
