''' Shared helpers for building small reads, reference and BAM fixtures,
and for checking that a pileup's columns are consistent.
'''

from pathlib import Path

import pysam
import yaml

import hits.utilities

from bam_realigner import cigar
from bam_realigner.cigar import CigarOp
from bam_realigner.ingest import Read
from bam_realigner.pileup import Pileup

memoized_property = hits.utilities.memoized_property

base_dir = Path(__file__).parent

def make_read(read_id, name, reference_start, cigar_string, seq, is_unmapped=False):
    return Read(read_id, name, seq, is_unmapped, reference_start, cigar.from_string(cigar_string))

def aligned_bases(read):
    ''' The read's bases that belong in layout columns (soft clips excluded). '''
    bases = []
    seq_offset = 0
    for op, length in read.cigar:
        if op.consumes_read:
            bases.append(read.seq[seq_offset:seq_offset + length])
        if op.consumes_sequence:
            seq_offset += length

    return ''.join(bases)

def check_column_consistency(pileup, reads):
    ''' Every aligned base of every read must land in the same column as the
    reference base it is aligned to, every inserted base in a reference gap
    column, and every gap column must be exactly as wide as its table entry.
    '''
    reference = pileup.reference
    reference_string = str(reference)

    for position, width in pileup.gap_table.items():
        column_end = reference.source_to_view(position)
        assert reference_string[column_end - width:column_end] == reference.gap_char * width

    for read in reads:
        if read.read_id not in pileup.aligned_by_id:
            continue

        ar = pileup.aligned_by_id[read.read_id]
        start, end = ar.placement

        assert end - start == len(ar.gapped)
        assert ar.gapped.ungapped == aligned_bases(read)

        ref_position = read.reference_start - pileup.region.begin
        read_position = 0

        for op, length in read.cigar:
            if op is CigarOp.MATCH:
                for _ in range(length):
                    read_column = start + ar.gapped.source_to_view(read_position)
                    assert read_column == reference.source_to_view(ref_position), (read.name, read_position)
                    read_position += 1
                    ref_position += 1

            elif op is CigarOp.INSERTION:
                for _ in range(length):
                    read_column = start + ar.gapped.source_to_view(read_position)
                    assert reference_string[read_column] == reference.gap_char, (read.name, read_position)
                    read_position += 1

            elif op is CigarOp.DELETION:
                ref_position += length

class LayoutCase:
    ''' A hand-worked window: reference, reads, and the expected layout. '''
    def __init__(self, name, details):
        self.name = name
        self.details = details

    def __repr__(self):
        return f'LayoutCase {self.name}'

    @memoized_property
    def reads(self):
        return [make_read(i, name, start, cigar_string, seq) for i, (name, start, cigar_string, seq) in enumerate(self.details['reads'])]

    @memoized_property
    def expected(self):
        return self.details['expected']

    def pileup(self, reads=None):
        if reads is None:
            reads = self.reads

        return Pileup.from_reads(self.details['reference'],
                                 reads,
                                 clip_policy=self.details.get('clip_policy', 'drop'),
                                )

    def gapped_reads_by_name(self, pileup):
        return {read.name: pileup.gapped_read(read.read_id) for read in self.reads}

def get_all_layout_cases(source_dir=None):
    if source_dir is None:
        source_dir = base_dir

    all_details = yaml.safe_load((Path(source_dir) / 'layout_cases.yaml').read_text())

    return {name: LayoutCase(name, details) for name, details in all_details.items()}

def write_fasta(fasta_fn, seqs):
    with open(fasta_fn, 'w') as fh:
        for name, seq in seqs.items():
            fh.write(f'>{name}\n{seq}\n')

def write_bam(bam_fn, seqs, alignments, index=True):
    ''' alignments are (name, contig, reference_start, cigar_string, seq)
    tuples, with contig None for an unplaced unmapped read.
    '''
    header = pysam.AlignmentHeader.from_references(list(seqs), [len(seq) for seq in seqs.values()])

    unsorted_fn = Path(bam_fn).with_suffix('.unsorted.bam')

    with pysam.AlignmentFile(str(unsorted_fn), 'wb', header=header) as fh:
        for name, contig, reference_start, cigar_string, seq in alignments:
            al = pysam.AlignedSegment(header)
            al.query_name = name
            al.query_sequence = seq

            if contig is None:
                al.flag = 4
                al.reference_id = -1
                al.reference_start = -1
            else:
                al.flag = 0
                al.reference_id = header.get_tid(contig)
                al.reference_start = reference_start
                al.cigarstring = cigar_string
                al.mapping_quality = 60

            fh.write(al)

    if index:
        pysam.sort('-o', str(bam_fn), str(unsorted_fn))
        pysam.index(str(bam_fn))
    else:
        unsorted_fn.rename(bam_fn)

    return bam_fn
