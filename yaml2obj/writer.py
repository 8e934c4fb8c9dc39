# write a configuration tree to a text stream as YAML

from typing import TextIO


class YamlWriter:
    def __init__(self, stream: TextIO):
        self.stream = stream
        self.level = 0

    def name(self, key: str) -> "YamlWriter":
        self.__indent()
        self.stream.write(key)
        self.stream.write(":")
        return self

    def value(self, value) -> "YamlWriter":
        self.stream.write(" ")
        self.stream.write(self.format(value))
        self.stream.write("\n")
        return self

    @staticmethod
    def format(value) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def begin_object(self) -> "YamlWriter":
        self.stream.write("\n")
        self.level += 1
        return self

    def end_object(self) -> "YamlWriter":
        if self.level <= 0:
            raise ValueError("end_object() without begin_object()")
        self.level -= 1
        return self

    def comment(self, body: str) -> "YamlWriter":
        self.__indent()
        self.stream.write("# ")
        self.stream.write(body)
        self.stream.write("\n")
        return self

    def __indent(self) -> "YamlWriter":
        self.stream.write("  " * self.level)
        return self
