''' Driving realignment over every region of an intervals file. '''

import logging
from dataclasses import dataclass
from pathlib import Path

import pysam

import bam_realigner.parallel
import bam_realigner.utilities
from .errors import DataConsistencyError, IndexOpenError, NameResolutionError
from .intervals import read_intervals
from .pileup import Pileup, realign_window
from .region import Region

logger = logging.getLogger(__name__)

@dataclass
class RegionResult:
    number: int
    region: Region
    pileup: Pileup = None
    error: Exception = None

    @property
    def succeeded(self):
        return self.error is None

def open_fasta(reference_fn):
    reference_fn = Path(reference_fn)

    logger.info(f'    Opening {reference_fn} (using FAI index) ...')

    if not reference_fn.exists():
        raise IndexOpenError(f'Could not open reference {reference_fn}')

    fai_fn = reference_fn.parent / (reference_fn.name + '.fai')
    if not fai_fn.exists():
        logger.info(f'    (building {fai_fn.name})')
        try:
            pysam.faidx(str(reference_fn))
        except pysam.utils.SamtoolsError as e:
            raise IndexOpenError('Could not build .fai index.') from e

    try:
        fasta_fh = pysam.FastaFile(str(reference_fn))
    except (OSError, ValueError) as e:
        raise IndexOpenError(f'Could not open FAI index for {reference_fn}.') from e

    return fasta_fh

def open_bam(alignment_fn):
    alignment_fn = Path(alignment_fn)

    logger.info(f'    Opening {alignment_fn} ...')

    try:
        bam_fh = pysam.AlignmentFile(str(alignment_fn), 'rb')
    except (OSError, ValueError) as e:
        raise IndexOpenError(f'Could not open BAM file {alignment_fn}.') from e

    if not bam_fh.has_index():
        bam_fh.close()
        raise IndexOpenError(f'Could not open BAI file for {alignment_fn}.')

    return bam_fh

def process_one_region(number, region, bam_fh, fasta_fh, options):
    ''' Errors confined to one window are recorded in the result rather than
    raised, so later regions still get processed.
    '''
    logger.info(f'Processing (#{number}) {region}')

    try:
        pileup = realign_window(region, bam_fh, fasta_fh, options)
    except (NameResolutionError, DataConsistencyError) as e:
        logger.error(f'Failed to process (#{number}) {region}: {e}')
        return RegionResult(number, region, error=e)

    return RegionResult(number, region, pileup=pileup)

def process_one_region_with_own_handles(number, region, options):
    ''' Pickleable entry point for pool workers; each opens its own handles. '''
    with open_bam(options.alignment_fn) as bam_fh, open_fasta(options.reference_fn) as fasta_fh:
        return process_one_region(number, region, bam_fh, fasta_fh, options)

class BamRealignerApp:
    def __init__(self, options, progress=None, use_logger_thread=True):
        self.options = options
        self.progress = bam_realigner.utilities.possibly_default_progress(progress)
        self.use_logger_thread = use_logger_thread

        self.fasta_fh = None
        self.bam_fh = None
        self.regions = None

    def run(self):
        logger.info('BAM Realigner')
        logger.info('=============')

        for name in self.options.field_names():
            logger.info(f'{name:<16}{getattr(self.options, name)}')

        logger.info('__OPENING INPUT FILES____________________________________________')

        try:
            self.open_inputs()
            results = self.process_all_regions()
        finally:
            self.close()

        return results

    def open_inputs(self):
        self.fasta_fh = open_fasta(self.options.reference_fn)
        self.bam_fh = open_bam(self.options.alignment_fn)

        logger.info(f'    Opening {self.options.intervals_fn} ...')
        self.regions = read_intervals(self.options.intervals_fn)

    def close(self):
        for fh in [self.fasta_fh, self.bam_fh]:
            if fh is not None:
                fh.close()

        self.fasta_fh = None
        self.bam_fh = None

    def process_all_regions(self):
        logger.info('__PROCESSING REGIONS_____________________________________________')

        numbered = list(enumerate(self.regions, 1))

        if self.options.max_procs == 1 or len(numbered) <= 1:
            results = [process_one_region(number, region, self.bam_fh, self.fasta_fh, self.options)
                       for number, region in self.progress(numbered)
                      ]
        else:
            pool = bam_realigner.parallel.get_pool(num_processes=self.options.max_procs,
                                                   use_logger_thread=self.use_logger_thread,
                                                  )
            with pool:
                args = [(number, region, self.options) for number, region in numbered]
                results = pool.starmap(process_one_region_with_own_handles, args)

        num_failed = sum(not result.succeeded for result in results)
        logger.info(f' DONE ({len(results) - num_failed} regions succeeded, {num_failed} failed)')

        return results
