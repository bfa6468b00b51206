import bisect

from .errors import DataConsistencyError

class GappedSequence:
    ''' A sequence of bases plus gap anchors.

    Each anchor (source_position, count) places count gaps immediately before
    the base at source_position (or at the end when source_position == len(seq)).
    "Source" positions count bases only; "view" positions count bases and gaps.
    '''

    def __init__(self, seq, gap_char='-'):
        self.seq = seq
        self.gap_char = gap_char

        self._positions = []
        self._counts = []

    def __repr__(self):
        return f'GappedSequence({str(self)!r})'

    def __str__(self):
        pieces = []
        last = 0
        for position, count in zip(self._positions, self._counts):
            pieces.append(self.seq[last:position])
            pieces.append(self.gap_char * count)
            last = position

        pieces.append(self.seq[last:])

        return ''.join(pieces)

    def __len__(self):
        return len(self.seq) + self.total_gaps

    @property
    def ungapped(self):
        return self.seq

    @property
    def total_gaps(self):
        return sum(self._counts)

    @property
    def anchors(self):
        return list(zip(self._positions, self._counts))

    def _check_source(self, source_position):
        if not 0 <= source_position <= len(self.seq):
            raise DataConsistencyError(f'source position {source_position} outside [0, {len(self.seq)}]')

    def _check_view(self, view_position):
        if not 0 <= view_position <= len(self):
            raise DataConsistencyError(f'view position {view_position} outside [0, {len(self)}]')

    def source_to_view(self, source_position):
        self._check_source(source_position)

        num_anchors = bisect.bisect_right(self._positions, source_position)
        return source_position + sum(self._counts[:num_anchors])

    def view_to_source(self, view_position):
        ''' Returns the source position of the base at view_position. Inside a
        run of gaps, that is the base following the run.
        '''
        self._check_view(view_position)

        gaps_before = 0

        for position, count in zip(self._positions, self._counts):
            run_start = position + gaps_before

            if view_position < run_start:
                break
            elif view_position < run_start + count:
                return position

            gaps_before += count

        return view_position - gaps_before

    def insert_gaps_at_source(self, source_position, count):
        self._check_source(source_position)

        if count < 0:
            raise DataConsistencyError(f'negative gap count {count}')
        elif count == 0:
            return

        i = bisect.bisect_left(self._positions, source_position)
        if i < len(self._positions) and self._positions[i] == source_position:
            self._counts[i] += count
        else:
            self._positions.insert(i, source_position)
            self._counts.insert(i, count)

    def insert_gaps(self, view_position, count):
        ''' Inserts count gaps at view_position. Gaps landing next to or inside
        an existing run are merged into it.
        '''
        self._check_view(view_position)
        self.insert_gaps_at_source(self.view_to_source(view_position), count)
