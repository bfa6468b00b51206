import datetime
import logging
import sys

import tqdm

verbosity_to_level = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}

def identity(x, **kwargs):
    return x

def possibly_default_progress(progress):
    ''' progress is either None or a tqdm-like callable wrapping an iterable. '''
    if progress is None:
        return identity
    elif progress is True:
        return tqdm.tqdm
    else:
        return progress

def configure_standard_logger(verbosity=1, results_dir=None):
    ''' Sends bam_realigner's log records (and captured warnings) to stderr
    and, if results_dir is given, to a timestamped file in it.
    '''
    level = verbosity_to_level.get(min(verbosity, 2), logging.WARNING)

    logger = logging.getLogger('bam_realigner')
    logger.propagate = False
    logger.setLevel(level)

    formatter = logging.Formatter(fmt='%(asctime)s: %(message)s',
                                  datefmt='%y-%m-%d %H:%M:%S',
                                 )

    handlers = []

    stream_handler = logging.StreamHandler(sys.stderr)
    handlers.append(stream_handler)

    if results_dir is not None:
        results_dir.mkdir(exist_ok=True, parents=True)
        log_fn = results_dir / f'log_{datetime.datetime.now():%y%m%d-%H%M%S}.out'
        file_handler = logging.FileHandler(log_fn)
        handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)

    # Route warnings.warn (e.g. NoAlignmentsWarning) through the same handlers.
    logging.captureWarnings(True)
    warnings_logger = logging.getLogger('py.warnings')
    warnings_logger.propagate = False
    for handler in handlers:
        warnings_logger.addHandler(handler)

    return logger, handlers
