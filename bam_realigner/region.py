import re
from dataclasses import dataclass

region_string_pattern = re.compile(r'^(?P<contig>[^:]+?)(?::(?P<begin>[\d,]+)(?:-(?P<end>[\d,]+))?)?$')

@dataclass(frozen=True)
class Region:
    ''' A 0-based half-open interval on one contig. end is None for "to the
    end of the contig" until the contig's length is known.
    '''
    contig: str
    begin: int = 0
    end: int = None

    def __post_init__(self):
        if self.begin < 0:
            raise ValueError(f'region begin must be non-negative: {self.begin}')

        if self.end is not None and self.end < self.begin:
            raise ValueError(f'region end {self.end} before begin {self.begin}')

    def __str__(self):
        if self.end is None:
            return f'{self.contig}:{self.begin + 1:,}'
        else:
            return f'{self.contig}:{self.begin + 1:,}-{self.end:,}'

    def __len__(self):
        if self.end is None:
            raise ValueError(f'{self} has no end')
        return self.end - self.begin

    def with_end(self, end):
        return Region(self.contig, self.begin, end)

    def extended_by(self, radius):
        end = None if self.end is None else self.end + radius
        return Region(self.contig, max(0, self.begin - radius), end)

    def covering(self, begin, end):
        ''' Smallest region containing both self and [begin, end). '''
        return Region(self.contig, min(self.begin, begin), max(self.end, end))

    def clamped(self, contig_length):
        end = contig_length if self.end is None else min(self.end, contig_length)
        return Region(self.contig, min(self.begin, end), end)

    @classmethod
    def from_string(cls, region_string):
        ''' Parses samtools-style chr, chr:begin or chr:begin-end, with 1-based
        inclusive coordinates and optional thousands separators.
        '''
        match = region_string_pattern.match(region_string.strip())
        if match is None:
            raise ValueError(f'invalid region: {region_string}')

        contig = match.group('contig')

        begin_string = match.group('begin')
        end_string = match.group('end')

        if begin_string is None:
            begin = 0
        else:
            begin = max(0, int(begin_string.replace(',', '')) - 1)

        if end_string is None:
            end = None
        else:
            end = int(end_string.replace(',', ''))

        return cls(contig, begin, end)
