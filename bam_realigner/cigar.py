import enum
import re

import pysam

from .errors import DataConsistencyError

class CigarOp(enum.Enum):
    MATCH = 'M'
    INSERTION = 'I'
    DELETION = 'D'
    PADDING = 'P'
    SOFT_CLIP = 'S'
    HARD_CLIP = 'H'

    @property
    def consumes_reference(self):
        return self in (CigarOp.MATCH, CigarOp.DELETION)

    @property
    def consumes_read(self):
        return self in (CigarOp.MATCH, CigarOp.INSERTION)

    @property
    def consumes_sequence(self):
        ''' Whether the operation's bases are present in the stored sequence.
        Soft-clipped bases are, even though they never get a layout column.
        '''
        return self in (CigarOp.MATCH, CigarOp.INSERTION, CigarOp.SOFT_CLIP)

# '=', 'X' and 'N' have no distinct meaning for layout purposes.
bam_code_to_op = {
    pysam.CMATCH: CigarOp.MATCH,
    pysam.CEQUAL: CigarOp.MATCH,
    pysam.CDIFF: CigarOp.MATCH,
    pysam.CINS: CigarOp.INSERTION,
    pysam.CDEL: CigarOp.DELETION,
    pysam.CREF_SKIP: CigarOp.DELETION,
    pysam.CPAD: CigarOp.PADDING,
    pysam.CSOFT_CLIP: CigarOp.SOFT_CLIP,
    pysam.CHARD_CLIP: CigarOp.HARD_CLIP,
}

char_to_op = {
    'M': CigarOp.MATCH,
    '=': CigarOp.MATCH,
    'X': CigarOp.MATCH,
    'I': CigarOp.INSERTION,
    'D': CigarOp.DELETION,
    'N': CigarOp.DELETION,
    'P': CigarOp.PADDING,
    'S': CigarOp.SOFT_CLIP,
    'H': CigarOp.HARD_CLIP,
}

cigar_block_pattern = re.compile(r'(\d+)(\D)')

def from_cigartuples(cigartuples):
    ''' Converts pysam-style (code, length) pairs into (CigarOp, length) pairs. '''
    ops = []

    for code, length in cigartuples:
        if code not in bam_code_to_op:
            raise DataConsistencyError(f'unsupported CIGAR operation code: {code}')

        ops.append((bam_code_to_op[code], length))

    return tuple(ops)

def from_string(cigar_string):
    ops = []

    consumed = 0
    for match in cigar_block_pattern.finditer(cigar_string):
        length, char = match.groups()
        if char not in char_to_op:
            raise DataConsistencyError(f'unsupported CIGAR operation: {char} in {cigar_string}')

        ops.append((char_to_op[char], int(length)))
        consumed += len(match.group(0))

    if consumed != len(cigar_string):
        raise DataConsistencyError(f'malformed CIGAR string: {cigar_string}')

    return tuple(ops)

def to_string(ops):
    return ''.join(f'{length}{op.value}' for op, length in ops)

def total_reference_length(ops):
    return sum(length for op, length in ops if op.consumes_reference)

def total_sequence_length(ops):
    return sum(length for op, length in ops if op.consumes_sequence)
