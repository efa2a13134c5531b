import re
from datetime import datetime, timezone
from reposerve.apkrepo.util import constants

_ILLEGAL_CHARACTERS = re.compile(r'[/\?<>\\:\*\|"\x00-\x1f\x7f-\x9f]')
_RESERVED_NAMES = re.compile(r'^\.+$')
_WINDOWS_RESERVED_NAMES = re.compile(r'^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$', re.IGNORECASE)
_WINDOWS_TRAILING = re.compile(r'[\. ]+$')

_BINARY_UNITS = ('Ki', 'Mi', 'Gi', 'Ti', 'Pi', 'Ei')

TIMESTAMP_FORMAT = '%Y/%m/%d %H:%M:%S'


def sanitize_filename(name):
    """
    Reduces an untrusted name to a single safe path segment

    Path separators, reserved and control characters are stripped, names made
    only of dots are emptied and the result is truncated to 255 bytes.  An
    empty string means nothing usable was left.
    """
    name = _ILLEGAL_CHARACTERS.sub('', name)
    name = _RESERVED_NAMES.sub('', name)
    name = _WINDOWS_RESERVED_NAMES.sub('', name)
    name = _WINDOWS_TRAILING.sub('', name)

    encoded = name.encode('utf-8')
    if len(encoded) > constants.MAX_FILENAME_BYTES:
        name = encoded[:constants.MAX_FILENAME_BYTES].decode('utf-8', errors='ignore')
    return name


def format_size(size):
    """
    Formats a byte count with binary prefixes (e.g. 512B, 12.3KiB)
    """
    if size < 1024:
        return '{0}B'.format(size)

    value = float(size)
    for unit in _BINARY_UNITS:
        value /= 1024
        if round(value, 1) < 1024 or unit == _BINARY_UNITS[-1]:
            break
    return '{0:.1f}{1}B'.format(value, unit)


def format_timestamp(mtime):
    """
    Formats a POSIX timestamp as a fixed-width UTC string
    """
    return datetime.fromtimestamp(mtime, timezone.utc).strftime(TIMESTAMP_FORMAT)
