import os
from typing import List, Optional, Union

from lxml.builder import E  # type: ignore
from lxml import etree  # type: ignore

from tested_fixture import InitializationEvent


# collects fixture initializations of one test session
class FixtureReportContext:
    def __init__(self):
        self.enabled = True
        # node id of the test being run, initializations are attributed to it
        self.current_nodeid: Optional[str] = None
        self.init()

    def init(self) -> None:
        self.module_node_list: List[FixtureReportNode] = []

    def get_node_from_module(self, module: str) -> "FixtureReportNode":
        for node in self.module_node_list:
            if node.module == module:
                return node
        node = FixtureReportNode(module)
        self.module_node_list.append(node)
        return node

    def record(self, event: InitializationEvent) -> None:
        self.get_node_from_module(event.module).add_case(event, self.current_nodeid)

    def find_case(self, module: str, name: str) -> Optional["FixtureReportCase"]:
        return self.get_node_from_module(module).find_case(name)

    def to_name_list(self) -> List[str]:
        r: List[str] = []
        for node in self.module_node_list:
            node.collect_name_list(r)
        return r

    def junit_xml(self) -> etree._Element:
        array: List = []
        for node in self.module_node_list:
            node.collect_junit_element(array)
        failures = sum(1 for node in self.module_node_list for case in node.case_list if case.failed)
        return E.testsuites(E.testsuite(*array, name="tested-fixture",
                                        tests=str(len(array)), failures=str(failures)))

    def write(self, result_dir: str, file_name: str) -> str:
        if not os.path.exists(result_dir):
            os.makedirs(result_dir)
        path = os.path.join(result_dir, file_name)
        with open(path, "w", encoding="utf-8") as out_strm:
            out_strm.write(etree.tostring(self.junit_xml(), encoding="unicode", pretty_print=True))
        return path


# fixtures declared in one module
class FixtureReportNode:
    def __init__(self, module: str):
        self.module = module
        self.case_list: List[FixtureReportCase] = []

    def add_case(self, event: InitializationEvent, triggered_by: Optional[str]):
        self.case_list.append(FixtureReportCase(self, event, triggered_by))

    def find_case(self, name: str) -> Optional["FixtureReportCase"]:
        for case in self.case_list:
            if case.event.name == name:
                return case
        return None

    def collect_name_list(self, array: List[str]):
        for case in self.case_list:
            array.append("%s.%s" % (self.module, case.event.name))

    def collect_junit_element(self, array: List) -> None:
        for case in self.case_list:
            case.collect_junit_element(array)


class FixtureReportCase:
    def __init__(self, parent_node: FixtureReportNode, event: InitializationEvent, triggered_by: Optional[str]):
        self.parent_node = parent_node
        self.event = event
        # None when the fixture was touched outside of a test, e.g. from a conftest
        self.triggered_by = triggered_by

    @property
    def failed(self) -> bool:
        return self.event.status != "ok"

    def short_str(self) -> str:
        return "module=%s fixture=%s status=%s triggered_by=%s" % (
            self.parent_node.module, self.event.name, self.event.status, self.triggered_by)

    def collect_junit_element(self, array: List) -> None:
        content: Union[etree._Element, str] = ""
        if self.failed:
            content = E.failure(self.event.message or "", message=self.event.message or "",
                                type=self.event.status)
        array.append(E.testcase(content,
                                classname=self.parent_node.module,
                                name=self.event.name,
                                time="%.6f" % self.event.duration,
                                context=self.event.context,
                                triggered_by=self.triggered_by or "",
                                thread=self.event.thread_name))
