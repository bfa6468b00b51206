import logging
import logging.handlers
import multiprocessing

def setup_logging_then_call(queue, func, args):
    ''' Register a QueueHandler connected queue, then call func
    with args and return its result. Intended as a pickleable function
    to be given to Pool.starmap or Pool.apply_async.
    '''
    queue_handler = logging.handlers.QueueHandler(queue)
    queue_handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Forked workers inherit the parent's handlers; everything should go
    # through the queue instead.
    loggers = [root_logger, logging.getLogger('bam_realigner'), logging.getLogger('py.warnings')]
    saved_state = [(logger, list(logger.handlers), logger.propagate) for logger in loggers]

    for logger, handlers, _ in saved_state:
        for handler in handlers:
            logger.removeHandler(handler)
        logger.propagate = True

    root_logger.addHandler(queue_handler)
    logging.captureWarnings(True)

    try:
        result = func(*args)
    finally:
        root_logger.removeHandler(queue_handler)

        for logger, handlers, propagate in saved_state:
            for handler in handlers:
                logger.addHandler(handler)
            logger.propagate = propagate

    return result

class PoolWithLoggerThread:
    ''' A context manager for a combination of a multiprocessing.Pool
    and a threaded handler for logging from the Pool's processes.
    '''

    def __init__(self, processes, logger):
        # Only a Manager().Queue() can be passed to Pool workers as an argument.
        manager = multiprocessing.Manager()
        self.queue = manager.Queue()

        self.queue_listener = logging.handlers.QueueListener(self.queue, *logger.handlers, respect_handler_level=True)

        self.pool = multiprocessing.Pool(processes=processes, maxtasksperchild=1)

    def starmap(self, func, iterable):
        ''' Provides the same interface as Pool.starmap, but connects each
        of the Pool's processes to the logging queue before executing func.
        '''
        arg_tuples = ((self.queue, func, args) for args in iterable)
        return self.pool.starmap(setup_logging_then_call, arg_tuples, 1)

    def __enter__(self):
        self.queue_listener.start()
        self.pool.__enter__()
        return self

    def __exit__(self, exception_type, exception_value, exception_traceback):
        self.pool.__exit__(exception_type, exception_value, exception_traceback)
        self.queue_listener.stop()

def get_pool(num_processes=1, use_logger_thread=False, logger=None):
    if use_logger_thread:
        if logger is None:
            logger = logging.getLogger('bam_realigner')
        pool = PoolWithLoggerThread(num_processes, logger)
    else:
        pool = multiprocessing.Pool(processes=num_processes, maxtasksperchild=1)

    return pool
