import logging
import os
import sys

from .exceptions import FormatError
from .strip import strip_file


logger = logging.getLogger(__name__)


def usage(progname):
    print(f'usage: {progname} <source.mobi> <output.mobi>')


def main(argv=None):
    argv = sys.argv if argv is None else argv

    logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)

    if len(argv) != 3:
        usage(os.path.basename(argv[0]) if argv else 'mobiless')
        return 1

    src, dst = argv[1:]

    try:
        strip_file(src, dst)
    except FormatError as e:
        logger.error(f'failed to remove the sources from \'{src}\': {e}')
        return 1
    except OSError as e:
        logger.error(e)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
