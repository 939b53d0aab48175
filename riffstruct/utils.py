'''
Helpers to show bytes coming from a file on a terminal.
'''

# bytes copied at a time by is_ascii()
ASCII_BLOCK_SIZE = 1 << 16


def escape(data) -> str:
    '''Renders raw bytes the way the dump shows them: NUL and newline
    escaped, printable ASCII as is and anything else as "\\??".'''
    out = []
    for b in bytes(data):
        if b == 0x00:
            out.append('\\0')
        elif b == 0x0a:
            out.append('\\n')
        elif 0x20 <= b <= 0x7e:
            out.append(chr(b))
        else:
            out.append('\\??')

    return ''.join(out)


def is_printable(data) -> bool:
    return all(0x20 <= b <= 0x7e for b in bytes(data))


def is_ascii(data) -> bool:
    '''7-bit clean, control characters included.'''
    for start in range(0, len(data), ASCII_BLOCK_SIZE):
        if not bytes(data[start:start + ASCII_BLOCK_SIZE]).isascii():
            return False

    return True
