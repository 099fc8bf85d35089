"""
# mobiless

Remove the embedded sources from Mobipocket e-books.

The files are described declaratively: a record of the format is a Chunk
whose class attributes are Fields, each one with an offset and a size inside
the record. Reading the value of a field reads the underlying buffer, writing
it writes the buffer, so a Chunk is only a view on the data and it never
becomes stale.

The operations available are

 1. unpack(): check that the fixed part of a record is inside the data and
    that its magic is correct; the rest is read lazily.

 2. remove_sources(): find every header generation of the e-book, collect the
    sections with the sources and compact the file in place without them.

The strictness of the checks is driven by the Compliant flags, a
FormatError is raised when the data is not what the format expects.
"""
from .strip import process_mobi_file, strip_file
