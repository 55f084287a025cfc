# Licensed to the Apache Software Foundation (ASF) under one
# or more contributor license agreements.  See the NOTICE file
# distributed with this work for additional information
# regarding copyright ownership.  The ASF licenses this file
# to you under the Apache License, Version 2.0 (the
# "License"); you may not use this file except in compliance
# with the License.  You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

"""CLI entry point for proto-ls."""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from proto_ls.emitter import ProtoEmitter
from proto_ls.language_server import ServerOptions, create_server
from proto_ls.parser import ProtoError, parse_file

LOG_LEVEL_ENV = "PROTO_LS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="proto-ls",
        description="Protocol Buffers parser and language server",
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level. Default: ${LOG_LEVEL_ENV} or WARNING",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse .proto files and report errors",
    )

    parse_parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        metavar="FILE",
        help=".proto files to parse",
    )

    parse_parser.add_argument(
        "--emit-proto",
        action="store_true",
        help="Print the parsed document as canonical .proto source",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the language server over stdio",
    )

    serve_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write logs to this file instead of stderr",
    )

    return parser.parse_args(args)


def configure_logging(level: str, log_file: Optional[Path] = None) -> None:
    if log_file is not None:
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=str(log_file))
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def parse_one(file_path: Path, emit_proto: bool = False) -> bool:
    """Parse a single file and print the outcome."""
    try:
        document = parse_file(file_path)
    except OSError as e:
        print(f"Error reading {file_path}: {e}", file=sys.stderr)
        return False
    except ProtoError as e:
        print(f"{file_path}:{e.line}:{e.column}: {e.message}", file=sys.stderr)
        return False

    if emit_proto:
        print(ProtoEmitter(document).emit(), end="")
    else:
        print(
            f"Parsed {file_path}: {len(document.messages)} message(s), "
            f"{len(document.services)} service(s)"
        )
    return True


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle the parse command."""
    success = True
    for file_path in args.files:
        if not file_path.exists():
            print(f"Error: File not found: {file_path}", file=sys.stderr)
            success = False
            continue
        if not parse_one(file_path, args.emit_proto):
            success = False
    return 0 if success else 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the serve command."""
    server = create_server(ServerOptions())
    server.start_io()
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)

    if parsed.command is None:
        print("Usage: proto-ls <command> [options]", file=sys.stderr)
        print("Commands: parse, serve", file=sys.stderr)
        print("Use 'proto-ls <command> --help' for more information", file=sys.stderr)
        return 1

    configure_logging(parsed.log_level, getattr(parsed, "log_file", None))

    if parsed.command == "parse":
        return cmd_parse(parsed)
    if parsed.command == "serve":
        return cmd_serve(parsed)

    return 0


if __name__ == "__main__":
    sys.exit(main())
