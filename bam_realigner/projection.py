''' Turning every reference-gap column into a real gap of the same width in the
reference and in every read that spans the column.

Columns are applied from the highest reference position to the lowest. Gaps
inserted at a column only move things to the right of it, so the reference
positions of columns still waiting to be applied stay valid, and a read
covering a pending column has never been shifted.
'''

import logging
from dataclasses import dataclass

import numpy as np

from .errors import DataConsistencyError
from .overlap import OverlapIndex

logger = logging.getLogger(__name__)

@dataclass
class ProjectionStats:
    columns: int = 0
    read_gaps: int = 0
    reference_gaps: int = 0
    boundary_skips: int = 0

def own_bases_before(insertions, position):
    ''' Number of a read's own inserted bases embedded to the left of position. '''
    return sum(length for p, length in insertions.items() if p < position)

def project_gaps(gap_table, insertion_table, aligned_reads, reference):
    ''' Applies gap_table (window position -> width) to aligned_reads (sorted
    by begin) and to the reference GappedSequence in place.

    insertion_table maps read id -> that read's own insertions, which are
    subtracted so a read's own inserted bases aren't padded twice.
    '''
    stats = ProjectionStats()

    if len(gap_table) == 0:
        return stats

    positions = sorted(gap_table, reverse=True)

    for position in positions:
        if gap_table[position] <= 0:
            raise DataConsistencyError(f'non-positive gap width {gap_table[position]} at {position}')

    begins = np.array([ar.begin for ar in aligned_reads], dtype=int)
    ends = np.array([ar.end for ar in aligned_reads], dtype=int)
    order = np.argsort(begins, kind='stable')

    # Built on the original ungapped spans, which stay valid for every pending column.
    index = OverlapIndex((ar.ref_begin, ar.ref_end, i) for i, ar in enumerate(aligned_reads))

    for position in positions:
        width = gap_table[position]

        for i in index.query(position):
            aligned_read = aligned_reads[i]

            # A read ending at the column never comes back from the half-open
            # query. A read starting at it gets shifted below instead of padded.
            if position == aligned_read.ref_begin:
                logger.debug(f'column {position}: read {aligned_read.read_id} starts at column, not padded')
                stats.boundary_skips += 1
                continue

            insertions = insertion_table.get(aligned_read.read_id, {})
            delta = insertions.get(position, 0)
            num_gaps = width - delta

            if num_gaps < 0:
                raise DataConsistencyError(f'read {aligned_read.read_id} inserts {delta} at {position}, wider than column ({width})')

            local_offset = int(position - begins[i]) + own_bases_before(insertions, position)

            if not 0 <= local_offset <= len(aligned_read.gapped):
                raise DataConsistencyError(f'read {aligned_read.read_id}: local offset {local_offset} for column {position} outside [0, {len(aligned_read.gapped)}]')

            if num_gaps > 0:
                aligned_read.gapped.insert_gaps(local_offset, num_gaps)
                ends[i] += num_gaps
                stats.read_gaps += num_gaps

        # Shifting every read at or past the column by the same amount keeps order sorted.
        first_to_shift = np.searchsorted(begins[order], position, side='left')
        to_shift = order[first_to_shift:]
        begins[to_shift] += width
        ends[to_shift] += width

        stats.columns += 1

    for i, aligned_read in enumerate(aligned_reads):
        aligned_read.begin = int(begins[i])
        aligned_read.end = int(ends[i])
        aligned_read.check_span()

    for position in positions:
        reference.insert_gaps_at_source(position, gap_table[position])
        stats.reference_gaps += gap_table[position]

    logger.debug(f'applied {stats.columns} gap columns: {stats.read_gaps} gaps in reads, {stats.reference_gaps} in reference, {stats.boundary_skips} boundary skips')

    return stats
