#!/usr/bin/env python3
'''
Dump the information of a Mobipocket file in the style of readelf(1).
'''
import sys
import os
import logging

from mobiless.ebooks.mobi import MOBIFile
from mobiless.exceptions import FormatError


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print('usage: %s <mobi file>' % progname)
    sys.exit(1)


def dump_header(mobi):
    hdr = mobi.header
    print(f'''PDB Header:
  Name:                              {hdr.database_name()}
  Type/Creator:                      {hdr.ident.value.decode('latin1')}
  Attributes:                        {hdr.attributes}
  Version:                           {hdr.version.value}
  Unique ID seed:                    {hdr.unique_id_seed}
  Number of sections:                {mobi.section_count}
  Length:                            {mobi.length} (bytes)''')


def dump_sections(mobi):
    print('''Sections:
  [Nr]   Offset     Length     Attr   UID''')
    for index, record in enumerate(mobi.records):
        print(f'''  [{index: >4d}] 0x{record.data_offset.value:08x} {mobi.section_length(index): >10d} 0x{record.attributes.value:02x}   0x{record.unique_id.value:06x}''')


def dump_mobi_header(header):
    sources = header.source_sections()
    print(f'''MOBI Header at section {header.index}:
  Version:                           {header.version.value}
  Type:                              {header.mobi_type.value}
  Title:                             {header.title}
  Encoding:                          {header.encoding.value}
  Compression:                       {header.compression.value}
  Encryption:                        {header.encryption.value}
  Header length:                     {header.header_length.value} (bytes)
  Sources:                           {f"sections {sources[0]}-{sources[-1]}" if sources else "none"}''')


if __name__ == '__main__':
    if len(sys.argv) < 2:
        usage(sys.argv[0])

    path = sys.argv[1]

    try:
        mobi = MOBIFile(path)
    except FormatError as e:
        logger.error(f'\'{path}\' is not a valid file: {e}')
        sys.exit(1)

    dump_header(mobi)
    dump_sections(mobi)

    for header in mobi.headers():
        dump_mobi_header(header)
