import logging

import pytest

import bam_realigner.test
from bam_realigner.gapped import GappedSequence

def pytest_assertrepr_compare(op, left, right):
    if isinstance(left, GappedSequence) and isinstance(right, str) and op == '==':
        return [
            f'Comparing GappedSequence to str:',
            f'   gapped: {str(left)}',
            f'   string: {right}',
            f'   anchors: {left.anchors}',
        ]

def pytest_generate_tests(metafunc, source_dir=None):
    if 'layout_case' in metafunc.fixturenames:
        layout_cases = bam_realigner.test.get_all_layout_cases(source_dir=source_dir)

        params = []

        for name, layout_case in layout_cases.items():
            if 'expected_failure' in layout_case.details:
                marks = [pytest.mark.xfail(strict=True)]
            else:
                marks = []

            param = pytest.param(layout_case, marks=marks, id=name)

            params.append(param)

        metafunc.parametrize('layout_case', params)

small_seqs = {
    'chr1': 'ACGTAGCTTGCA' * 5,
    'chr2': 'TTGACCAGTA' * 3,
}

def small_alignments():
    chr1 = small_seqs['chr1']
    chr2 = small_seqs['chr2']

    return [
        ('r1', 'chr1', 10, '10M', chr1[10:20]),
        ('r2', 'chr1', 15, '5M1I5M', chr1[15:20] + 'G' + chr1[20:25]),
        ('r3', 'chr1', 40, '10M', chr1[40:50]),
        ('r4', 'chr2', 5, '5M', chr2[5:10]),
        ('unplaced', None, None, None, 'ACGTACGT'),
    ]

@pytest.fixture
def small_inputs(tmp_path):
    ''' A two-contig reference and an indexed BAM of a handful of reads. '''
    fasta_fn = tmp_path / 'reference.fa'
    bam_realigner.test.write_fasta(fasta_fn, small_seqs)

    bam_fn = tmp_path / 'reads.bam'
    bam_realigner.test.write_bam(bam_fn, small_seqs, small_alignments())

    return {
        'seqs': small_seqs,
        'fasta_fn': fasta_fn,
        'bam_fn': bam_fn,
        'dir': tmp_path,
    }

@pytest.fixture(autouse=True)
def restore_logging():
    ''' The CLI configures package loggers and warning capture; undo that
    between tests.
    '''
    names = ['bam_realigner', 'py.warnings']
    saved = {name: (list(logging.getLogger(name).handlers), logging.getLogger(name).propagate, logging.getLogger(name).level) for name in names}

    yield

    for name, (handlers, propagate, level) in saved.items():
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if handler not in handlers:
                logger.removeHandler(handler)
        logger.propagate = propagate
        logger.setLevel(level)

    logging.captureWarnings(False)
