class MobilessException(Exception):
    '''Base class to extend in order to throw exception in mobiless.

    It takes a message and the chain of the layers that caused the exception,
    the innermost first.
    '''

    def __init__(self, message='', chain=None):
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        message = super().__str__()
        if not self.chain:
            return message

        return '%s (at %s)' % (message, '.'.join(reversed(self.chain)))


class FormatError(MobilessException):
    '''The data doesn't respect the format.'''
    pass


class MagicException(FormatError):
    pass


class BoundsException(FormatError):
    '''An offset or a length points outside the data it should live into.'''
    pass


class DecodeException(FormatError):
    pass


class UnrecoverableException(FormatError):
    '''This is raised when the data has already been modified and it's not
    possible to continue without corrupting it.'''
    pass
