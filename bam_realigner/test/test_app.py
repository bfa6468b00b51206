import pytest

import bam_realigner.test
from bam_realigner.app import BamRealignerApp, open_bam, open_fasta
from bam_realigner.errors import IndexOpenError, NameResolutionError, NoAlignmentsWarning
from bam_realigner.options import RealignerOptions
from bam_realigner.region import Region

@pytest.fixture
def options(small_inputs):
    intervals_fn = small_inputs['dir'] / 'regions.txt'
    intervals_fn.write_text('chr1:20-22\nchrX:1-10\nchr2:21-25\n')

    return RealignerOptions(reference_fn=small_inputs['fasta_fn'],
                            alignment_fn=small_inputs['bam_fn'],
                            intervals_fn=intervals_fn,
                            window_radius=2,
                           )

def check_results(results, seqs):
    assert [result.number for result in results] == [1, 2, 3]
    assert [result.succeeded for result in results] == [True, False, True]

    first, second, third = results

    assert first.region == Region('chr1', 19, 22)
    assert str(first.pileup.reference) == seqs['chr1'][10:20] + '-' + seqs['chr1'][20:25]

    assert isinstance(second.error, NameResolutionError)
    assert second.pileup is None

    assert third.pileup.aligned_reads == []
    assert str(third.pileup.reference) == seqs['chr2'][18:27]

def test_failed_region_does_not_stop_run(small_inputs, options):
    app = BamRealignerApp(options)

    with pytest.warns(NoAlignmentsWarning):
        results = app.run()

    check_results(results, small_inputs['seqs'])

    assert app.bam_fh is None
    assert app.fasta_fh is None

def test_multiple_processes(small_inputs, options):
    app = BamRealignerApp(options.replace(max_procs=2), use_logger_thread=False)

    results = app.run()

    check_results(results, small_inputs['seqs'])

def test_fai_is_built(small_inputs):
    fai_fn = small_inputs['dir'] / 'reference.fa.fai'
    assert not fai_fn.exists()

    with open_fasta(small_inputs['fasta_fn']) as fasta_fh:
        assert fasta_fh.get_reference_length('chr2') == 30

    assert fai_fn.exists()

def test_missing_inputs(small_inputs):
    with pytest.raises(IndexOpenError):
        open_fasta(small_inputs['dir'] / 'missing.fa')

    with pytest.raises(IndexOpenError):
        open_bam(small_inputs['dir'] / 'missing.bam')

def test_missing_bam_index(small_inputs):
    unindexed_fn = small_inputs['dir'] / 'unindexed.bam'
    bam_realigner.test.write_bam(unindexed_fn, small_inputs['seqs'], [('r1', 'chr1', 10, '4M', 'ACGT')], index=False)

    with pytest.raises(IndexOpenError):
        open_bam(unindexed_fn)

def test_missing_intervals_fails_before_processing(options):
    app = BamRealignerApp(options.replace(intervals_fn=options.intervals_fn.parent / 'missing.txt'))

    with pytest.raises(IndexOpenError):
        app.run()

    assert app.bam_fh is None
