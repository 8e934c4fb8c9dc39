from typing import TYPE_CHECKING, Optional
from yaml2obj.writer import YamlWriter
from tested_fixture_args.error_counter import ErrorCounter

if TYPE_CHECKING:
    from tested_fixture_args.args import TestedFixtureArgs


class ReportArgs:
    DEFAULT_RESULT_DIR = "tested-fixture-result"
    FILE_NAME = "fixture-report.xml"

    def __init__(self, parent: "TestedFixtureArgs"):
        self.parent = parent
        self.enabled = False
        self.result_dir: Optional[str] = ReportArgs.DEFAULT_RESULT_DIR

    def fill_and_validate(self, data: Optional[dict], error_counter: ErrorCounter):
        # report section can be omitted
        if data is None:
            return
        self.enabled = self.parent.check_bool_field(data, "enabled", False, error_counter)
        if "result_dir" in data:
            self.result_dir = self.parent.check_mandatory_field(
                data, "result_dir", verify_result_dir, error_counter)

    def write_to(self, writer: YamlWriter):
        writer.comment("write a fixture initialization report (JUnit XML) at the end of the session")
        writer.name("enabled").value(self.enabled)
        writer.name("result_dir").value(self.result_dir)

    @classmethod
    def auto_configure(cls, parent: "TestedFixtureArgs") -> "ReportArgs":
        return ReportArgs(parent)


def verify_result_dir(value) -> Optional[str]:
    if not isinstance(value, str) or len(value.strip()) == 0:
        return "result_dir must be a directory name"
    return None
