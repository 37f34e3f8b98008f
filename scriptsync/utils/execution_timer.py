from contextlib import ContextDecorator
import time

class ExecutionTimer(ContextDecorator):
    """Wall-clock timer usable as a context manager or decorator."""

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.execution_time = None
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.end_time = time.perf_counter()
        self.execution_time = self.end_time - self.start_time

    def get_execution_time(self):
        if self.execution_time is not None:
            return self.execution_time
        return time.perf_counter() - self.start_time
