import logging
import os
from typing import List, Optional

import pytest

from tested_fixture import add_listener, remove_listener
from tested_fixture_args import ReportArgs, TestedFixtureArgs
from .fixture_report import FixtureReportContext

logger = logging.getLogger(__name__)

MARKER = "tested_fixture"

session_key = pytest.StashKey["TestedFixtureSession"]()


def pytest_addoption(parser):
    group = parser.getgroup("tested-fixture arguments")
    group.addoption('--fixture-report',
                    action="store_true",
                    dest="fixture_report",
                    help="write the fixture initialization report at the end of the session")
    group.addoption('--tested-fixture-conf-path',
                    action="store",
                    dest="tested_fixture_conf_path",
                    metavar="",
                    default=TestedFixtureArgs.DEFAULT_PATH,
                    help="path of tested-fixture configuration file")


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "%s: test which produces a fixture through @tested_fixture" % MARKER)

    args = load_args(config)
    args.log.apply()

    rc = FixtureReportContext()
    rc.enabled = bool(config.option.fixture_report) or args.report.enabled
    session = TestedFixtureSession(config, args, rc)
    config.stash[session_key] = session
    config.pluginmanager.register(session, "tested-fixture-session")
    add_listener(rc.record)


def pytest_unconfigure(config) -> None:
    session = config.stash.get(session_key, None)
    if session is None:
        return
    remove_listener(session.rc.record)
    del config.stash[session_key]
    config.pluginmanager.unregister(session)


def load_args(config) -> TestedFixtureArgs:
    path = os.path.join(str(config.invocation_params.dir), config.option.tested_fixture_conf_path)
    if not os.path.isfile(path):
        return TestedFixtureArgs.auto_configure()
    args = TestedFixtureArgs.from_yaml(path)
    if args.error_counter.error_count > 0:
        raise pytest.UsageError("invalid tested-fixture configuration file %s: %s" % (
            path, "; ".join(args.error_counter.error_messages)))
    return args


def is_tested_fixture_item(item) -> bool:
    return getattr(getattr(item, "obj", None), "__tested_fixture__", None) is not None


class TestedFixtureSession:
    # not a test class
    __test__ = False

    def __init__(self, config, args: TestedFixtureArgs, rc: FixtureReportContext):
        self.config = config
        self.args = args
        self.rc = rc
        self.report_path: Optional[str] = None

    # must run before the mark plugin deselects items with -m
    @pytest.hookimpl(tryfirst=True)
    def pytest_collection_modifyitems(self, config, items: List[pytest.Item]) -> None:
        for item in items:
            if is_tested_fixture_item(item):
                item.add_marker(MARKER)

    def pytest_runtest_logstart(self, nodeid: str, location) -> None:
        self.rc.current_nodeid = nodeid

    def pytest_runtest_logfinish(self, nodeid: str, location) -> None:
        self.rc.current_nodeid = None

    def pytest_sessionfinish(self, session) -> None:
        if not self.rc.enabled:
            return
        result_dir = os.path.join(str(self.config.invocation_params.dir),
                                  self.args.report.result_dir or ReportArgs.DEFAULT_RESULT_DIR)
        self.report_path = self.rc.write(result_dir, ReportArgs.FILE_NAME)
        logger.info("fixture report is written to %s", self.report_path)

    def pytest_terminal_summary(self, terminalreporter) -> None:
        if self.report_path is not None:
            terminalreporter.write_sep("-", "fixture report: %s" % self.report_path)
