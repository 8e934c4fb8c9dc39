import logging
from typing import TYPE_CHECKING, Optional
from yaml2obj.writer import YamlWriter
from tested_fixture_args.error_counter import ErrorCounter

if TYPE_CHECKING:
    from tested_fixture_args.args import TestedFixtureArgs

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LogArgs:
    DEFAULT_LEVEL = "WARNING"

    def __init__(self, parent: "TestedFixtureArgs"):
        self.parent = parent
        self.level: Optional[str] = LogArgs.DEFAULT_LEVEL

    def fill_and_validate(self, data: Optional[dict], error_counter: ErrorCounter):
        # log section can be omitted
        if data is None:
            return
        level = data.get("level")
        if level is None:
            return
        if str(level).upper() not in LEVEL_NAMES:
            error_counter.record("line %d: @level: must be one of %s" % (
                data["__line__"]["level"], "/".join(LEVEL_NAMES)))
            self.level = None
        else:
            self.level = str(level).upper()

    def write_to(self, writer: YamlWriter):
        writer.comment("level of the 'tested_fixture' logger: %s" % "/".join(LEVEL_NAMES))
        writer.name("level").value(self.level)

    def apply(self, logger_name: str = "tested_fixture"):
        if self.level is not None:
            logging.getLogger(logger_name).setLevel(self.level)

    @classmethod
    def auto_configure(cls, parent: "TestedFixtureArgs") -> "LogArgs":
        return LogArgs(parent)
