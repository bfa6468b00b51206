''' Loading the reference window and the alignments overlapping a region.

The requested region is widened by the configured radius, then further to
cover the full reference span of every alignment loaded, and only then is the
reference sequence read.
'''

import logging
import warnings
from dataclasses import dataclass

from .errors import NameResolutionError, NoAlignmentsWarning
from .ingest import Read
from .region import Region

logger = logging.getLogger(__name__)

@dataclass
class LoadedWindow:
    region: Region
    reference_seq: str
    reads: list

def resolve_contig(bam_fh, contig):
    tid = bam_fh.get_tid(contig)
    if tid < 0:
        raise NameResolutionError(contig)
    return tid

def load_alignments(bam_fh, region):
    ''' Streams records from region's begin until a record without a
    reference or a record starting past the (growing) window end. Returns the
    region extended to cover every loaded alignment and the Reads.
    '''
    tid = resolve_contig(bam_fh, region.contig)

    if region.end is None:
        region = region.with_end(bam_fh.get_reference_length(region.contig))

    reads = []

    for al in bam_fh.fetch(region.contig, region.begin):
        if al.reference_id == -1:
            break

        if (al.reference_id, al.reference_start) > (tid, region.end):
            break

        if not al.is_unmapped and al.query_sequence is None:
            logger.debug(f'{al.query_name} has no stored sequence, skipping')
            continue

        if al.reference_id == tid and not al.is_unmapped and al.reference_end is not None:
            region = region.covering(al.reference_start, al.reference_end)

        reads.append(Read.from_alignment(len(reads), al))

    return region, reads

def load_reference(fasta_fh, region):
    try:
        contig_length = fasta_fh.get_reference_length(region.contig)
    except KeyError:
        raise NameResolutionError(region.contig)

    region = region.clamped(contig_length)
    reference_seq = fasta_fh.fetch(region.contig, region.begin, region.end).upper()

    return region, reference_seq

def load_window(region, bam_fh, fasta_fh, window_radius=0):
    region = region.extended_by(window_radius)

    logger.debug('Loading alignments...')
    region, reads = load_alignments(bam_fh, region)

    if len(reads) == 0:
        warnings.warn(f'No alignments in region {region}', NoAlignmentsWarning)
    else:
        logger.debug(f'  => DONE ({len(reads)} alignments, window {region})')

    logger.debug('Loading reference...')
    region, reference_seq = load_reference(fasta_fh, region)
    logger.debug('  => DONE')

    return LoadedWindow(region, reference_seq, reads)
