import io
from pathlib import Path

import pandas as pd

from .errors import IndexOpenError
from .region import Region

bed_header_prefixes = ('#', 'track', 'browser')

def read_bed(bed_fn):
    ''' Regions from the first three columns of a BED file. '''
    with open(bed_fn) as fh:
        lines = [line for line in fh if line.strip() and not line.startswith(bed_header_prefixes)]

    if len(lines) == 0:
        return []

    df = pd.read_csv(io.StringIO(''.join(lines)), sep='\t', header=None, dtype=str)

    if df.shape[1] < 3:
        raise ValueError(f'{bed_fn} has fewer than 3 columns')

    regions = [Region(contig.strip(), int(begin), int(end)) for contig, begin, end in df[[0, 1, 2]].itertuples(index=False)]

    return regions

def read_region_strings(fn):
    regions = []

    with open(fn) as fh:
        for line in fh:
            line = line.strip()
            if line == '' or line.startswith('#'):
                continue

            regions.append(Region.from_string(line))

    return regions

def read_intervals(fn):
    ''' Regions to process, from either a BED file (by .bed suffix) or a file
    of samtools-style region strings.
    '''
    fn = Path(fn)

    if not fn.exists():
        raise IndexOpenError(f'Could not open intervals file {fn}')

    if fn.suffix == '.bed':
        regions = read_bed(fn)
    else:
        regions = read_region_strings(fn)

    return regions
