import intervaltree

class OverlapIndex:
    ''' Point-overlap queries over a fixed batch of tagged half-open intervals. '''

    def __init__(self, tagged_intervals):
        # intervaltree refuses null intervals, and they can't cover any point anyway.
        nonempty = [(begin, end, tag) for begin, end, tag in tagged_intervals if begin < end]
        self.tree = intervaltree.IntervalTree.from_tuples(nonempty)

    def __len__(self):
        return len(self.tree)

    def query(self, point):
        return sorted(iv.data for iv in self.tree.at(point))
