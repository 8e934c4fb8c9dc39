from .args import TestedFixtureArgs
from .error_counter import ErrorCounter
from .log import LogArgs
from .report import ReportArgs

__all__ = ["TestedFixtureArgs", "ErrorCounter", "LogArgs", "ReportArgs"]
