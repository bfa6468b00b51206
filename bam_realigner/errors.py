class RealignerError(Exception):
    pass

class NameResolutionError(RealignerError, KeyError):
    ''' A region names a contig that the alignment file doesn't know about.
    Fatal to the region, not to the run.
    '''
    def __init__(self, contig):
        self.contig = contig
        super().__init__(contig)

    def __str__(self):
        return f'Unknown reference {self.contig}'

class DataConsistencyError(RealignerError, ValueError):
    ''' An internal invariant was violated, which means the alignment records
    feeding a window were malformed (CIGAR disagreeing with position or sequence).
    '''
    pass

class IndexOpenError(RealignerError, OSError):
    ''' A required input or index couldn't be opened. Raised before any
    region is processed.
    '''
    pass

class NoAlignmentsWarning(UserWarning):
    pass
