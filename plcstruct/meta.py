import copy
import logging


class FieldDescriptor(object):
    """Wrapper around field access of a Record related class.

    Accessed from the class it returns the field declaration, accessed from
    an instance it returns the plain value stored for that field."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, type=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.field.name not in data:
            self.logger.debug("initialize default for field named '%s'", self.field.name)
            data[self.field.name] = self.field.value_from_default()

        return data[self.field.name]

    def __set__(self, instance, value):
        instance.__dict__[self.field.name] = value


class FieldBase(object):

    def contribute_to_record(self, cls, name):
        if name in cls.__dict__:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def value_from_default(self):
        # every record gets its own copy, defaults can be lists or records
        return copy.deepcopy(self.default)


class Meta(object):
    """Class containing metadata about the record"""

    def __init__(self):
        self.fields = []
        self.declarations = {}

    def add_field(self, name, field):
        if name not in self.declarations:
            self.fields.append(name)
        self.declarations[name] = field

    def get_field(self, name):
        return self.declarations[name]

    def get_fields(self):
        return [(_, self.declarations[_]) for _ in self.fields]


class MetaRecord(type):

    def __new__(cls, names, bases, attrs):
        '''The field table of a record is built here, once, when the class is
        created: parents' fields come first then the ones declared in the body.'''
        module = attrs.pop('__module__')
        qualname = attrs.pop('__qualname__', None)
        classcell = attrs.pop('__classcell__', None)

        new_attrs = {
            '__module__': module,
        }
        if qualname is not None:
            new_attrs['__qualname__'] = qualname
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaRecord, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaRecord)]
        for parent in parents:
            for obj_name, obj in parent._meta.get_fields():
                new_cls._meta.add_field(obj_name, obj)

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        return new_cls

    def add_to_class(cls, name, value):
        if hasattr(value, 'contribute_to_record'):
            logging.getLogger(__name__).debug('contribute_to_record() found for field \'%s\'' % name)
            cls._meta.add_field(name, value)
            value.contribute_to_record(cls, name)
        else:
            setattr(cls, name, value)
