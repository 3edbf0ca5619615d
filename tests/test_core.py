import pytest

from plcstruct import fields
from plcstruct.core import Record
from plcstruct.enum import PlcType
from plcstruct.meta import Meta


class Position(Record):
    x = fields.ScalarField(PlcType.REAL, order=0)
    y = fields.ScalarField(PlcType.REAL, order=1)


class Axis(Record):
    id = fields.ScalarField(PlcType.UINT, order=0, default=1)
    label = fields.StringField(order=1, max_length=12, default='axis')
    position = fields.NestedField(Position, order=2)
    history = fields.ArrayField(PlcType.DINT, order=3, length=3)
    notes = fields.ScalarField(PlcType.DINT)


def test_meta():
    assert isinstance(Axis._meta, Meta)
    assert Axis.get_ordered_fields_name() == ['id', 'label', 'position', 'history', 'notes']
    assert isinstance(Axis.id, fields.ScalarField)
    assert Axis.id.name == 'id'
    assert Position.get_ordered_fields_name() == ['x', 'y']


def test_defaults():
    axis = Axis()

    assert axis.id == 1
    assert axis.label == 'axis'
    assert axis.position == Position(x=0.0, y=0.0)
    assert axis.history == [0, 0, 0]
    assert axis.notes == 0


def test_defaults_are_not_shared():
    first = Axis()
    second = Axis()

    first.history[0] = 10
    first.position.x = 1.5

    assert second.history == [0, 0, 0]
    assert second.position.x == 0.0


def test_list_default_is_copied():
    class Buffered(Record):
        samples = fields.ArrayField(PlcType.INT, order=0, default=[1, 2, 3])

    first = Buffered()
    first.samples.append(4)

    assert Buffered().samples == [1, 2, 3]


def test_keyword_values():
    axis = Axis(id=7, label='x-axis')

    assert axis.id == 7
    assert axis.label == 'x-axis'
    assert axis.history == [0, 0, 0]


def test_unknown_keyword():
    with pytest.raises(TypeError):
        Axis(speed=10)


def test_equality():
    assert Axis(id=2) == Axis(id=2)
    assert Axis(id=2) != Axis(id=3)
    assert Position() != Axis()


def test_repr():
    assert repr(Position(x=1.0, y=2.0)) == '<Position(x=1.0,y=2.0)>'
    assert str(Position(x=1.0, y=2.0)) == 'x: 1.0\ny: 2.0\n'


def test_inheritance():
    class Father(Record):
        field_a = fields.StringField(order=0, max_length=16)
        field_b = fields.ScalarField(PlcType.UDINT, order=1)

    class Son(Father):
        field_c = fields.StringField(order=2, max_length=8)

    assert Son.get_ordered_fields_name() == ['field_a', 'field_b', 'field_c']
    assert Father.get_ordered_fields_name() == ['field_a', 'field_b']

    son = Son.unpack(b'A' * 16 + b'\x01\x02\x03\x04' + b'ABCDEFGH')

    assert son.field_a == 'A' * 16
    assert son.field_b == 0x04030201
    assert son.field_c == 'ABCDEFGH'


def test_override_in_subclass():
    class Father(Record):
        value = fields.ScalarField(PlcType.INT, order=0)
        other = fields.ScalarField(PlcType.INT, order=1)

    class Son(Father):
        value = fields.ScalarField(PlcType.DINT, order=0)

    assert Son.get_ordered_fields_name() == ['value', 'other']
    assert Son.layout() == {
        'value': (0, 4),
        'other': (4, 2),
    }
    assert Father.layout() == {
        'value': (0, 2),
        'other': (2, 2),
    }


def test_layout():
    assert Axis.layout() == {
        'id': (0, 2),
        'label': (4, 12),
        'position': (16, 8),
        'history': (24, 12),
    }
    assert Axis.size() == 36


def test_pack_unpack():
    axis = Axis(id=3, label='spindle', position=Position(x=1.25, y=-2.5), history=[1, -1, 100])

    data = axis.pack()

    assert len(data) == Axis.size()
    assert data[:2] == b'\x03\x00'
    assert data[4:11] == b'spindle'

    assert Axis.unpack(data) == axis
