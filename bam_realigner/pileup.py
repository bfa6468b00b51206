import logging

import hits.utilities

from .gapped import GappedSequence
from .ingest import aggregate_gap_table, ingest_reads
from .projection import project_gaps
from .region import Region
from .window import load_window

memoized_property = hits.utilities.memoized_property

logger = logging.getLogger(__name__)

class Pileup:
    ''' The column-consistent layout of one window: a gapped reference and,
    for every read with an alignment, its gapped sequence and placement in the
    same coordinates.
    '''
    def __init__(self, region, reference, reads, aligned_reads, gap_table, stats):
        self.region = region
        self.reference = reference
        self.reads = reads
        self.aligned_reads = aligned_reads
        self.gap_table = gap_table
        self.stats = stats

    @classmethod
    def from_reads(cls, reference_seq, reads, region=None, clip_policy='drop', gap_char='-'):
        ''' Lays out reads (whose reference_starts are contig coordinates) over
        reference_seq, which covers region.
        '''
        if region is None:
            region = Region('window', 0, len(reference_seq))

        reference = GappedSequence(reference_seq, gap_char=gap_char)

        aligned_reads, insertion_table = ingest_reads(reads, region.begin, clip_policy=clip_policy, gap_char=gap_char)
        gap_table = aggregate_gap_table(insertion_table)
        stats = project_gaps(gap_table, insertion_table, aligned_reads, reference)

        return cls(region, reference, list(reads), aligned_reads, gap_table, stats)

    def __repr__(self):
        return f'Pileup {self.region} ({len(self.aligned_reads)} aligned reads, {len(self.gap_table)} gap columns)'

    def __str__(self):
        return self.to_text()

    @memoized_property
    def reads_by_id(self):
        return {read.read_id: read for read in self.reads}

    @memoized_property
    def aligned_by_id(self):
        return {ar.read_id: ar for ar in self.aligned_reads}

    def gapped_read(self, read_id):
        return str(self.aligned_by_id[read_id].gapped)

    def placement(self, read_id):
        return self.aligned_by_id[read_id].placement

    @property
    def width(self):
        return len(self.reference)

    def to_text(self):
        ''' One row for the reference, then one per aligned read. Clipped
        flanks, if kept, are shown in lowercase outside the read's columns.
        '''
        margin = 0
        for ar in self.aligned_reads:
            start, _ = ar.placement
            margin = max(margin, len(ar.clipped_prefix) - start)

        rows = [(str(self.region), margin, str(self.reference))]

        for ar in self.aligned_reads:
            start, _ = ar.placement
            text = ar.clipped_prefix.lower() + str(ar.gapped) + ar.clipped_suffix.lower()
            rows.append((self.reads_by_id[ar.read_id].name, margin + start - len(ar.clipped_prefix), text))

        name_width = max(len(name) for name, _, _ in rows)

        lines = [f'{name:<{name_width}}  {" " * offset}{text}' for name, offset, text in rows]

        return '\n'.join(lines)

def realign_window(region, bam_fh, fasta_fh, options):
    window = load_window(region, bam_fh, fasta_fh, window_radius=options.window_radius)

    pileup = Pileup.from_reads(window.reference_seq,
                               window.reads,
                               region=window.region,
                               clip_policy=options.clip_policy,
                               gap_char=options.gap_char,
                              )

    logger.debug(repr(pileup))

    return pileup
