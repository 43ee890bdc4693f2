# pqbench/errors.py


class BenchError(Exception):
    """Base class for every failure the harness reports to the user."""


class BenchArgumentError(BenchError):
    pass


class InputError(BenchError):
    def __init__(self, message: str, line_no: int | None = None):
        super().__init__(message)
        self.line_no = line_no


class EngineError(BenchError):
    pass


class EngineConnectionError(EngineError):
    pass


class QueryError(EngineError):
    def __init__(self, message: str, query: str = ""):
        super().__init__(message)
        self.query = query


class BenchmarkAborted(BenchError):
    """Raised by the fail-fast policy; carries the failure that stopped the run."""

    def __init__(self, failure):
        super().__init__(f"worker {failure.worker_id} failed: {failure.message}")
        self.failure = failure


class TemplateError(BenchError):
    pass
