'''
Entry points to remove the sources from a Mobipocket file, in memory or
from a path to another one.
'''
import logging
from pathlib import Path

from .ebooks.mobi import MOBIFile


logger = logging.getLogger(__name__)


def process_mobi_file(data, length=None) -> int:
    '''Remove the sources from the e-book contained in data (a bytearray that
    is modified in place) and return the new length: only the bytes before it
    must be used.'''
    if not isinstance(data, bytearray):
        raise TypeError(f'the data must be a bytearray to be modified in place, not {type(data).__name__}')

    mobi = MOBIFile(data, length=length)

    logger.info('Removing sources...')

    return mobi.remove_sources()


def strip_file(src, dst) -> int:
    '''Write to dst the e-book at src without sources; dst is created only
    if the whole processing succeeds.'''
    data = bytearray(Path(src).read_bytes())
    logger.info('File loaded with length: %d', len(data))

    length = process_mobi_file(data)

    with open(dst, 'wb') as output:
        output.write(data[:length])

    return length
