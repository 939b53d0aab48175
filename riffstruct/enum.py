from enum import Flag


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE  = 0
    MAGIC = 1 << 0  # a magic mismatch is fatal
    SIZE  = 1 << 1  # fixed-size records must declare exactly their size
    ALIGN = 1 << 2  # odd-sized top level chunks are followed by a pad byte
    INHERIT = 1 << 3
    STRICT = MAGIC | SIZE
