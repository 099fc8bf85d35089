from enum import Flag


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format.

    With MAGIC a wrong magic raises MagicException, with ENUM a value outside
    of the enum raises FormatError; otherwise a warning is logged and the
    parsing goes on. INHERIT delegates the decision to the father.'''
    NONE    = 0
    ENUM    = 1 << 0
    MAGIC   = 1 << 1
    INHERIT = 1 << 2
