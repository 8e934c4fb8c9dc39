import io
import os
from typing import Any
import yaml
from yaml.loader import SafeLoader
from yaml.composer import Composer
from yaml.constructor import Constructor


# every mapping gets a "__line__" entry: key -> line number of the key, "__begin__" -> first line of the mapping
class YamlLoaderWithLineNumber(SafeLoader):
    def compose_node(self, parent, index):
        node = Composer.compose_node(self, parent, index)
        node.__line__ = self.line + 1
        return node

    def construct_mapping(self, node, deep=False):
        line_info = {k.value: k.__line__ for k, _ in node.value}
        line_info["__begin__"] = min(line_info.values(), default=node.__line__)

        mapping = Constructor.construct_mapping(self, node, deep=deep)
        mapping["__line__"] = line_info
        return mapping

    @classmethod
    def from_file(cls, path: str) -> Any:
        with open(path) as file:
            o = cls.load(file)
        o['__fullpath__'] = os.path.abspath(path)
        return o

    @classmethod
    def from_string(cls, body: str) -> Any:
        return cls.load(io.StringIO(body))

    @classmethod
    def load(cls, stream) -> Any:
        o = yaml.load(stream, Loader=cls)
        # an empty document is an empty configuration
        return {"__line__": {"__begin__": 1}} if o is None else o
