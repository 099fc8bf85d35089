from enum import Enum


class PalmDOCCompression(Enum):
    NONE      = 1
    PALMDOC   = 2
    HUFF_CDIC = 17480


class PalmDOCEncryption(Enum):
    NONE           = 0
    OLD_MOBIPOCKET = 1
    MOBIPOCKET     = 2


class MobiType(Enum):
    BOOK          = 2
    PALMDOC       = 3
    AUDIO         = 4
    KINDLEGEN     = 232
    KF8           = 248
    NEWS          = 257
    NEWS_FEED     = 258
    NEWS_MAGAZINE = 259
    PICS          = 513
    WORD          = 514
    XLS           = 515
    PPT           = 516
    TEXT          = 517
    HTML          = 518


class MobiEncoding(Enum):
    '''Text encoding of the document, the title is encoded with it too.'''
    CP1252 = 1252
    UTF8   = 65001

    @property
    def codec(self):
        return {
            MobiEncoding.CP1252: 'cp1252',
            MobiEncoding.UTF8: 'utf-8',
        }[self]
