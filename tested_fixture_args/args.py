import os
from pathlib import Path
from typing import Callable, List, Optional

from yaml2obj.loader import YamlLoaderWithLineNumber
from yaml2obj.writer import YamlWriter

from tested_fixture_args.error_counter import ErrorCounter
from tested_fixture_args.log import LogArgs
from tested_fixture_args.report import ReportArgs

SCHEMA_VERSION = "1.0"


class TestedFixtureArgs:
    # not a test class
    __test__ = False

    DEFAULT_PATH = ".tested-fixture.yml"

    def __init__(self):
        self.report = ReportArgs(self)
        self.log = LogArgs(self)
        self.error_counter = ErrorCounter()
        self.source_object: dict = {}

    # fill content and print message if necessary
    # 'data' should have line number information
    def fill_and_validate(self, data: dict):
        self.error_counter = ErrorCounter()
        self.source_object = data
        schema_version = data.get("schema-version")
        if schema_version is not None and str(schema_version) != SCHEMA_VERSION:
            self.error_counter.record("line %d: @schema-version: %s is not supported, use %s" % (
                data["__line__"]["schema-version"], schema_version, SCHEMA_VERSION))
        self.report.fill_and_validate(data.get("report"), self.error_counter)
        self.log.fill_and_validate(data.get("log"), self.error_counter)

        if self.error_counter.error_count > 0:
            self.error_counter.print_errors()

    def write_to(self, writer: YamlWriter):
        writer.comment("tested-fixture pytest plugin configuration file")
        writer.comment(" ")

        writer.name("schema-version").value(SCHEMA_VERSION)

        writer.name("report").begin_object()
        self.report.write_to(writer)
        writer.end_object()

        writer.name("log").begin_object()
        self.log.write_to(writer)
        writer.end_object()

    def describe(self) -> List[str]:
        """settings in effect after reading, one line each"""
        lines = []
        if self.report.enabled:
            lines.append("report: %s" % os.path.join(self.report.result_dir or "", ReportArgs.FILE_NAME))
        else:
            lines.append("report: disabled (enable with --fixture-report)")
        lines.append("log level: %s" % (self.log.level or LogArgs.DEFAULT_LEVEL))
        return lines

    def write_as_yaml(self, path: str):
        p = Path(path).resolve()
        p.parents[0].mkdir(parents=True, exist_ok=True)
        with p.open('w') as s:
            self.write_to(YamlWriter(s))

    # read value from dictionary and verify the content.
    # if error is not found, return the value itself
    # else, record error message with line number information and return None
    def check_mandatory_field(self, data: dict, key: str, verifier: Callable, error_counter: ErrorCounter) -> Optional[str]:
        value = data.get(key)
        line_info = data["__line__"]
        if value is None:
            error_counter.record("object from line %d: key %s is not found" % (
                line_info["__begin__"], key))
            return None
        msg = verifier(value)
        if msg is not None:
            error_counter.record("line %d: @%s: %s" % (line_info[key], key, msg))
            return None
        return value

    # parse optional boolean field
    def check_bool_field(self, data: dict, key: str, default_value: bool, error_counter: ErrorCounter) -> bool:
        value = data.get(key)
        if value is None:
            return default_value
        if not isinstance(value, bool):
            error_counter.record("line %d attribute %s: %s is not true or false" % (
                data["__line__"][key], key, str(value)))
            return default_value
        return value

    @classmethod
    def from_yaml(cls, path: str) -> "TestedFixtureArgs":
        args = TestedFixtureArgs()
        args.fill_and_validate(YamlLoaderWithLineNumber.from_file(path))
        return args

    @classmethod
    def auto_configure(cls) -> "TestedFixtureArgs":
        args = TestedFixtureArgs()
        args.report = ReportArgs.auto_configure(args)
        args.log = LogArgs.auto_configure(args)
        return args
