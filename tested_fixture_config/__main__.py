import argparse
import os
import sys
from typing import List, Optional

from tested_fixture_args import TestedFixtureArgs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tested-fixture-config",
        description="create or verify the configuration file of the tested-fixture pytest plugin")
    parser.add_argument("--file", default=TestedFixtureArgs.DEFAULT_PATH,
                        help="configuration file (default: %(default)s)")
    parser.add_argument("--force", action="store_true",
                        help="with --create, overwrite an existing file")
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("--create", action="store_true", help="write a file with the default settings")
    action.add_argument("--verify", action="store_true",
                        help="check an existing file and show the settings pytest will use")
    return parser


def create(path: str, force: bool) -> int:
    if os.path.exists(path) and not force:
        print("%s already exists, use --force to overwrite it." % path)
        return 1
    TestedFixtureArgs.auto_configure().write_as_yaml(path)
    print("configuration written to %s" % os.path.abspath(path))
    return 0


def verify(path: str) -> int:
    if not os.path.isfile(path):
        print("%s does not exist." % path)
        return 1
    print("verifying %s" % os.path.abspath(path))
    # errors are printed while reading
    conf = TestedFixtureArgs.from_yaml(path)
    if conf.error_counter.error_count > 0:
        return 1
    for line in conf.describe():
        print("  " + line)
    print("No obvious errors were found.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.create:
        return create(args.file, args.force)
    return verify(args.file)


if __name__ == "__main__":
    sys.exit(main())
