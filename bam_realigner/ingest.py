''' Converting reference-aligned reads into per-read gapped sequences and
tables of the insertions they make relative to the reference.

All positions produced here are window coordinates: reference position minus
the window's begin.
'''

import logging
from dataclasses import dataclass

from . import cigar
from .cigar import CigarOp
from .errors import DataConsistencyError
from .gapped import GappedSequence

logger = logging.getLogger(__name__)

clip_policies = ('drop', 'flank')

@dataclass(frozen=True)
class Read:
    read_id: int
    name: str
    seq: str
    is_unmapped: bool
    reference_start: int
    cigar: tuple

    @classmethod
    def from_alignment(cls, read_id, al):
        if al.cigartuples is None:
            ops = ()
        else:
            ops = cigar.from_cigartuples(al.cigartuples)

        if al.is_unmapped:
            reference_start = None
        else:
            reference_start = al.reference_start

        return cls(read_id,
                   al.query_name,
                   al.query_sequence or '',
                   al.is_unmapped,
                   reference_start,
                   ops,
                  )

    @property
    def reference_length(self):
        return cigar.total_reference_length(self.cigar)

    @property
    def reference_end(self):
        if self.reference_start is None:
            return None
        else:
            return self.reference_start + self.reference_length

@dataclass
class AlignedRead:
    ''' A read's position in the window's current gapped coordinates.

    begin is the column of the read's first aligned reference base. Any
    leading inserted bases sit immediately before it, so the read occupies
    [begin - leading_insertion, end) and that span is always len(gapped) long.
    ref_begin and ref_end are the read's original, ungapped reference span.
    '''
    read_id: int
    gapped: GappedSequence
    ref_begin: int
    ref_end: int
    begin: int
    end: int
    leading_insertion: int = 0
    clipped_prefix: str = ''
    clipped_suffix: str = ''

    @property
    def placement(self):
        return (self.begin - self.leading_insertion, self.end)

    def check_span(self):
        placed_begin, placed_end = self.placement
        if placed_end - placed_begin != len(self.gapped) or self.begin > self.end:
            raise DataConsistencyError(f'read {self.read_id}: span {self.placement} disagrees with gapped length {len(self.gapped)}')

def ingest_read(read, window_begin, clip_policy='drop', gap_char='-'):
    ''' Walks read's CIGAR, returning an AlignedRead (or None if the read has
    no alignment to lay out) and a dictionary of window position -> number of
    bases the read inserts before that position.
    '''
    if clip_policy not in clip_policies:
        raise ValueError(f'invalid clip policy: {clip_policy}')

    if read.is_unmapped or read.reference_start is None or read.reference_length == 0:
        return None, {}

    ref_begin = read.reference_start - window_begin
    if ref_begin < 0:
        raise DataConsistencyError(f'{read.name} starts at {read.reference_start}, before window begin {window_begin}')

    ref_offset = 0
    read_offset = 0
    seq_offset = 0

    bases = []
    deletions = []
    insertions = {}
    leading_insertion = 0

    clipped = {
        'prefix': [],
        'suffix': [],
    }

    for op, length in read.cigar:
        if op.consumes_sequence and seq_offset + length > len(read.seq):
            raise DataConsistencyError(f'{read.name}: CIGAR {cigar.to_string(read.cigar)} longer than sequence ({len(read.seq)})')

        if op is CigarOp.MATCH:
            bases.append(read.seq[seq_offset:seq_offset + length])
            ref_offset += length
            read_offset += length
            seq_offset += length

        elif op is CigarOp.INSERTION:
            bases.append(read.seq[seq_offset:seq_offset + length])

            position = ref_begin + ref_offset
            insertions[position] = insertions.get(position, 0) + length

            if ref_offset == 0:
                leading_insertion += length

            read_offset += length
            seq_offset += length

        elif op is CigarOp.DELETION:
            deletions.append((read_offset, length))
            ref_offset += length

        elif op is CigarOp.SOFT_CLIP:
            side = 'prefix' if read_offset == 0 and ref_offset == 0 else 'suffix'
            clipped[side].append(read.seq[seq_offset:seq_offset + length])
            seq_offset += length

        elif op in (CigarOp.PADDING, CigarOp.HARD_CLIP):
            pass

        else:
            raise DataConsistencyError(f'unhandled CIGAR operation {op}')

    if seq_offset != len(read.seq):
        raise DataConsistencyError(f'{read.name}: CIGAR {cigar.to_string(read.cigar)} accounts for {seq_offset} bases, sequence has {len(read.seq)}')

    gapped = GappedSequence(''.join(bases), gap_char=gap_char)
    for source_position, length in deletions:
        gapped.insert_gaps_at_source(source_position, length)

    if clip_policy == 'flank':
        clipped_prefix = ''.join(clipped['prefix'])
        clipped_suffix = ''.join(clipped['suffix'])
    else:
        clipped_prefix = ''
        clipped_suffix = ''

    aligned_read = AlignedRead(read.read_id,
                               gapped,
                               ref_begin=ref_begin,
                               ref_end=ref_begin + ref_offset,
                               begin=ref_begin,
                               end=ref_begin - leading_insertion + len(gapped),
                               leading_insertion=leading_insertion,
                               clipped_prefix=clipped_prefix,
                               clipped_suffix=clipped_suffix,
                              )

    return aligned_read, insertions

def ingest_reads(reads, window_begin, clip_policy='drop', gap_char='-'):
    ''' Returns aligned reads sorted by begin and a dictionary of read id ->
    that read's own insertions.
    '''
    aligned_reads = []
    insertion_table = {}

    for read in reads:
        aligned_read, insertions = ingest_read(read, window_begin, clip_policy=clip_policy, gap_char=gap_char)

        if aligned_read is None:
            logger.debug(f'{read.name} has no alignment to lay out')
            continue

        aligned_reads.append(aligned_read)

        if insertions:
            insertion_table[read.read_id] = insertions

    aligned_reads = sorted(aligned_reads, key=lambda ar: (ar.begin, ar.read_id))

    return aligned_reads, insertion_table

def aggregate_gap_table(insertion_table):
    ''' Window position -> widest insertion any read makes there. '''
    gap_table = {}

    for insertions in insertion_table.values():
        for position, length in insertions.items():
            gap_table[position] = max(gap_table.get(position, 0), length)

    return gap_table
