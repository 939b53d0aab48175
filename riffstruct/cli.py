'''
Dump the chunks of a RIFF (WAVE) file.

 $ riffdump sample.wav
 RIFF[ChunkSize: 36, Format: 'WAVE']
 [SubChunk1Id: 'fmt ', size: 16, AudioFormat: 'PCM', ...]

Set the DEBUG environment variable to see what the parser is doing.
'''
import logging
import os
import sys

from .containers.riff import RIFFFile
from .enum import Compliant
from .exceptions import RiffException
from .streams import Stream


logger = logging.getLogger(__name__)


def usage(progname):
    print('usage: %s <riff file>' % progname, file=sys.stderr)


def dump(cursor, out=None, compliant=Compliant.STRICT):
    '''Prints each chunk as soon as it's parsed, so what precedes
    an error is shown anyway.'''
    out = sys.stdout if out is None else out
    riff = RIFFFile(compliant=compliant)

    for chunk in riff.iter_unpack(cursor):
        print(chunk, file=out)

    return riff


def main(argv=None):
    argv = sys.argv if argv is None else argv

    logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.WARNING)

    if len(argv) != 2:
        usage(argv[0] if argv else 'riffdump')
        return 1

    path = argv[1]

    try:
        stream = Stream(path)
    except OSError as e:
        print('open(%s): %s' % (path, e.strerror), file=sys.stderr)
        return 1

    with stream:
        try:
            dump(stream.cursor())
        except RiffException as e:
            logger.debug('failed to parse \'%s\'' % path, exc_info=True)
            print('ERROR: %s' % e, file=sys.stderr)
            return 1

    return 0
