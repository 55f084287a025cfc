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

"""Tests for the proto-ls command line."""

import pytest

from proto_ls import cli
from proto_ls.cli import main, parse_args


@pytest.fixture
def proto_file(tmp_path):
    path = tmp_path / "demo.proto"
    path.write_text(
        'syntax = "proto3";\n'
        "package demo;\n"
        "message User { string name = 1; }\n"
        "service Users { rpc Get (User) returns (User); }\n"
    )
    return path


def test_no_command(capsys):
    assert main([]) == 1
    assert "Usage: proto-ls" in capsys.readouterr().err


def test_parse_summary(proto_file, capsys):
    assert main(["parse", str(proto_file)]) == 0
    out = capsys.readouterr().out
    assert f"Parsed {proto_file}: 1 message(s), 1 service(s)" in out


def test_parse_emit_proto(proto_file, capsys):
    assert main(["parse", "--emit-proto", str(proto_file)]) == 0
    out = capsys.readouterr().out
    assert out.startswith('syntax = "proto3";\n\npackage demo;\n')
    assert "    string name = 1;\n" in out


def test_parse_error_reports_position(tmp_path, capsys):
    path = tmp_path / "broken.proto"
    path.write_text('syntax = "proto3";\nmessage M {\n  string a = 1\n}\n')
    assert main(["parse", str(path)]) == 1
    err = capsys.readouterr().err
    assert f"{path}:4:1: invalid message field: expected ';', got '}}'" in err


def test_missing_file(tmp_path, capsys):
    assert main(["parse", str(tmp_path / "nope.proto")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_one_failure_fails_the_run(proto_file, tmp_path, capsys):
    broken = tmp_path / "broken.proto"
    broken.write_text("message M {}")
    assert main(["parse", str(proto_file), str(broken)]) == 1
    out = capsys.readouterr().out
    assert "Parsed" in out


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("PROTO_LS_LOG_LEVEL", "debug")
    args = parse_args(["parse", "x.proto"])
    assert args.log_level == "DEBUG"


def test_log_level_flag():
    args = parse_args(["--log-level", "info", "serve"])
    assert args.log_level == "INFO"
    assert args.log_file is None


class FakeServer:
    def __init__(self, options):
        self.options = options
        self.started = False

    def start_io(self):
        self.started = True


def test_serve_starts_stdio_server(monkeypatch, tmp_path):
    servers = []

    def fake_create_server(options):
        servers.append(FakeServer(options))
        return servers[-1]

    monkeypatch.setattr(cli, "create_server", fake_create_server)

    log_file = tmp_path / "server.log"
    assert main(["serve", "--log-file", str(log_file)]) == 0
    assert len(servers) == 1
    assert servers[0].started
    assert servers[0].options.name == "proto-ls"
