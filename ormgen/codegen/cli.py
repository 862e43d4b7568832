# SPDX-PackageName: ormgen
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the ormgen contributors.


from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Any,
)

import argparse
import logging
import pathlib

from ormgen import errors
from ormgen._internal._codegen import _generator as generator
from ormgen._internal._codegen._models import ModelGenerator
from ormgen._internal._config import load_config_file, make_options

if TYPE_CHECKING:
    from collections.abc import Sequence


DEFAULT_CONFIG = "ormgen.toml"


class ColoredArgumentParser(argparse.ArgumentParser):
    def error(self, message):  # type: ignore [no-untyped-def]
        c = generator.C
        self.exit(
            2,
            f"{c.BOLD}{c.FAIL}error:{c.ENDC} "
            f"{c.BOLD}{message:s}{c.ENDC}\n",
        )


parser = ColoredArgumentParser(
    prog="ormgen-generate",
    description="Generate a Python model class from a database table.",
)
parser.add_argument("table", metavar="TABLE", help="Name of the table.")
parser.add_argument(
    "--config",
    metavar="PATH",
    help=f"TOML config file (default: {DEFAULT_CONFIG} in the project "
    "directory, if present).",
)
parser.add_argument("--dsn", metavar="URL", help="SQLAlchemy database URL.")
parser.add_argument("--schema", help="Name of the schema.")
parser.add_argument("--name", help="Name of the model class.")
parser.add_argument("--namespace", help="Package the model belongs to.")
parser.add_argument(
    "--extends",
    metavar="BASE",
    help="Dotted path of the base class (default: orm.Model).",
)
parser.add_argument(
    "--exclude-fields",
    metavar="FIELDS",
    help="Comma-separated columns to leave out of the model.",
)
parser.add_argument(
    "--camelize",
    action="store_true",
    default=None,
    help="Use lowerCamelCase names for attributes and aliases.",
)
parser.add_argument(
    "--get-set",
    action="store_true",
    default=None,
    help="Make attributes protected and generate accessors.",
)
parser.add_argument(
    "--annotate",
    action="store_true",
    default=None,
    help="Describe columns in #: comments above attributes.",
)
parser.add_argument(
    "--map-column",
    action="store_true",
    default=None,
    help="Generate a column_map() method.",
)
parser.add_argument(
    "--abstract",
    action="store_true",
    default=None,
    help="Generate an abstract model.",
)
parser.add_argument(
    "-f",
    "--force",
    action="store_true",
    default=None,
    help="Regenerate the model file if it already exists.",
)
parser.add_argument(
    "-o",
    "--output",
    metavar="DIR",
    help="Directory the model file is written to.",
)
parser.add_argument(
    "-d",
    "--directory",
    metavar="ROOT",
    help="Project directory that relative paths are resolved against.",
)
parser.add_argument(
    "-v",
    "--verbose",
    action="store_true",
    help="Log every step of the generation.",
)


def _load_file_config(args: argparse.Namespace) -> dict[str, Any] | None:
    if args.config is not None:
        return load_config_file(pathlib.Path(args.config))

    root = pathlib.Path(args.directory or ".")
    default = root / DEFAULT_CONFIG
    if default.is_file():
        return load_config_file(default)
    return None


def main(argv: Sequence[str] | None = None) -> None:
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        options = make_options(
            _load_file_config(args),
            table_name=args.table,
            database_url=args.dsn,
            schema_name=args.schema,
            class_name=args.name,
            namespace_name=args.namespace,
            superclass_name=args.extends,
            excluded_columns=args.exclude_fields,
            use_camel_cased_names=args.camelize,
            generate_accessors=args.get_set,
            annotate_columns=args.annotate,
            generate_column_map=args.map_column,
            is_abstract=args.abstract,
            overwrite_existing=args.force,
            models_dir=args.output,
            root_dir=args.directory,
        )
    except errors.ConfigurationError as e:
        parser.error(str(e))

    ModelGenerator(options).run()


if __name__ == "__main__":
    main()
