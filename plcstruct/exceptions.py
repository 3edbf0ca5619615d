class PlcStructException(Exception):
    '''Base class to extend in order to throw exception in plcstruct.

    It takes the message and optionally the chain of the fields that
    caused the exception, innermost first.
    '''

    def __init__(self, message='', chain=None):
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        message = super().__str__()
        if not self.chain:
            return message

        return '%s (field %s)' % (message, '.'.join(reversed(self.chain)))


class ShapeException(PlcStructException):
    '''The layout of a shape cannot be determined.'''

    def __init__(self, message='', shape=None, member=None, chain=None):
        self.shape = shape
        self.member = member
        super().__init__(message, chain=chain)


class BufferException(PlcStructException):
    '''The buffer is too short for the shape it should contain.'''
    pass


class PackException(PlcStructException):
    '''A value cannot be represented with the type of its field.'''
    pass


class AddressFormatException(PlcStructException):
    pass


class TransferException(PlcStructException):
    '''A chunk callback didn't return usable data.'''
    pass
