import argparse
import logging
import sys
from pathlib import Path

import tqdm

import bam_realigner

logger = logging.getLogger(__name__)

def build_options(args, **extra):
    from bam_realigner.options import RealignerOptions

    overrides = {
        'reference_fn': args.reference,
        'alignment_fn': args.alignments,
        'window_radius': args.window_radius,
        'clip_policy': args.clip_policy,
        'verbosity': args.verbosity,
        'gap_char': args.gap_char,
    }
    overrides.update(extra)

    if args.config is not None:
        options = RealignerOptions.from_yaml(args.config, **overrides)
    else:
        options = RealignerOptions(**{k: v for k, v in overrides.items() if v is not None})

    return options

def realign(args):
    import bam_realigner.app
    import bam_realigner.errors
    import bam_realigner.utilities

    options = build_options(args, intervals_fn=args.intervals, max_procs=args.max_procs)

    bam_realigner.utilities.configure_standard_logger(options.verbosity, results_dir=args.log_dir)

    app = bam_realigner.app.BamRealignerApp(options, progress=args.progress)

    try:
        results = app.run()
    except bam_realigner.errors.IndexOpenError as e:
        logger.error(str(e))
        sys.exit(1)

    if args.show:
        for result in results:
            if result.succeeded:
                print(result.pileup.to_text())
                print()

def show(args):
    import bam_realigner.app
    import bam_realigner.errors
    import bam_realigner.pileup
    import bam_realigner.region
    import bam_realigner.utilities

    options = build_options(args)

    bam_realigner.utilities.configure_standard_logger(options.verbosity)

    region = bam_realigner.region.Region.from_string(args.region)

    try:
        with bam_realigner.app.open_bam(options.alignment_fn) as bam_fh, bam_realigner.app.open_fasta(options.reference_fn) as fasta_fh:
            result = bam_realigner.app.process_one_region(1, region, bam_fh, fasta_fh, options)
    except bam_realigner.errors.IndexOpenError as e:
        logger.error(str(e))
        sys.exit(1)

    if not result.succeeded:
        sys.exit(1)

    print(result.pileup.to_text())

def main(argv=None):
    parser = argparse.ArgumentParser(prog='bam-realigner')

    parser.add_argument('--version', action='version', version=bam_realigner.__version__)

    subparsers = parser.add_subparsers(dest='subcommand', title='subcommands')
    subparsers.required = True

    def add_common_args(parser):
        parser.add_argument('reference', type=Path, help='reference FASTA file (a .fai index is built if missing)')
        parser.add_argument('alignments', type=Path, help='coordinate-sorted BAM file with a .bai index')
        parser.add_argument('--config', type=Path, help='yaml file of options; command line values take precedence')
        parser.add_argument('--window_radius', type=int, help='number of bases to extend each region by on both sides (default 100)')
        parser.add_argument('--clip_policy', choices=['drop', 'flank'], help='whether soft-clipped bases are dropped or shown as unaligned flanks (default drop)')
        parser.add_argument('--gap_char', help='character used for gaps (default -)')
        parser.add_argument('--verbosity', type=int, help='0: warnings only, 1: progress, 2: details (default 1)')

    parser_realign = subparsers.add_parser('realign', help='build pileups for every region in an intervals file')
    add_common_args(parser_realign)
    parser_realign.add_argument('intervals', type=Path, help='regions to process, one chr:begin-end per line or BED')
    parser_realign.add_argument('--max_procs', type=int, help='maximum number of regions to process at once (default 1)')
    parser_realign.add_argument('--progress', const=tqdm.tqdm, action='store_const', help='show progress bars')
    parser_realign.add_argument('--log_dir', type=Path, help='if specified, also write a timestamped log file here')
    parser_realign.add_argument('--show', action='store_true', help='print each pileup')
    parser_realign.set_defaults(func=realign)

    parser_show = subparsers.add_parser('show', help='print the pileup of a single region')
    add_common_args(parser_show)
    parser_show.add_argument('region', help='region as chr:begin-end (1-based, inclusive)')
    parser_show.set_defaults(func=show)

    args = parser.parse_args(argv)

    args.func(args)
