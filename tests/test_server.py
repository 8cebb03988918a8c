"""Tests for the session loop and server lifecycle."""

import io
import json

import httpx
import pytest
from structlog.testing import capture_logs

from leetcode_mcp.protocol.server import MCPServer
from leetcode_mcp.tools.base import ToolRegistry
from leetcode_mcp.tools.leetcode import LeetCodeDailyChallengeTool
from leetcode_mcp.transport.base import ConnectionError as TransportConnectionError, MessageError
from leetcode_mcp.transport.stdio import StdioTransport

from .test_leetcode import CHALLENGE_PAYLOAD, FAST_RETRY


def leetcode_registry(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ToolRegistry([LeetCodeDailyChallengeTool(FAST_RETRY, client=client)])


def run_session(lines, registry=None, config=None):
    """Feed lines to a server and return the decoded output lines."""
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    transport = StdioTransport(stdin=stdin, stdout=stdout)
    if registry is None:
        registry = leetcode_registry(lambda request: httpx.Response(200, json=CHALLENGE_PAYLOAD))

    MCPServer(transport, config, tool_registry=registry).run()

    output = stdout.getvalue()
    assert output == "" or output.endswith("\n")
    return [json.loads(line) for line in output.splitlines()]


class TestSessionLoop:
    """Test reading, dispatching and answering lines."""

    def test_tools_list(self):
        """Test tools/list lists the daily challenge tool."""
        responses = run_session(['{"jsonrpc":"2.0","id":1,"method":"tools/list"}'])

        assert len(responses) == 1
        assert responses[0]["id"] == 1
        names = [tool["name"] for tool in responses[0]["result"]["tools"]]
        assert names == ["get_leetcode_daily_challenge"]

    def test_unknown_tool(self):
        """Test a call to an unknown tool."""
        responses = run_session([
            '{"jsonrpc":"2.0","id":2,"method":"tools/call","params":{"name":"nonexistent"}}'
        ])

        assert responses == [{
            "jsonrpc": "2.0",
            "id": 2,
            "error": {"code": -32601, "message": "Tool not found"}
        }]

    def test_tool_call_end_to_end(self):
        """Test a successful daily challenge call."""
        responses = run_session([
            '{"jsonrpc":"2.0","id":"c1","method":"tools/call",'
            '"params":{"name":"get_leetcode_daily_challenge","arguments":{"include_content":false}}}'
        ])

        content = responses[0]["result"]["content"]
        assert len(content) == 1
        assert content[0]["type"] == "text"
        assert content[0]["text"] == (
            "LeetCode Daily Challenge retrieved successfully:\n\n"
            "**Two Sum**\n"
            "**Difficulty:** Easy\n"
            "**Problem ID:** 1\n"
            "**Link:** https://leetcode.com/problems/two-sum/\n"
            "**Date:** 2024-05-01\n"
        )

    def test_backend_failure(self):
        """Test an unreachable backend becomes an internal error."""
        registry = leetcode_registry(lambda request: httpx.Response(500))

        responses = run_session([
            '{"jsonrpc":"2.0","id":3,"method":"tools/call",'
            '"params":{"name":"get_leetcode_daily_challenge"}}'
        ], registry=registry)

        assert responses[0]["error"] == {
            "code": -32603,
            "message": "Internal error: LeetCode API returned status 500"
        }

    def test_blank_lines_ignored(self):
        """Test blank and whitespace-only lines produce no output."""
        assert run_session(["", "   ", "\t"]) == []

    def test_malformed_line_skipped(self):
        """Test unparseable lines are dropped and the loop continues."""
        responses = run_session([
            "not json",
            '{"jsonrpc":"2.0","id":1}',
            '{"jsonrpc":"2.0","id":9,"method":"initialize"}',
        ])

        assert len(responses) == 1
        assert responses[0]["id"] == 9
        assert responses[0]["result"]["protocolVersion"] == "2024-11-05"

    def test_responses_in_request_order(self):
        """Test one response per request, in order."""
        responses = run_session([
            '{"jsonrpc":"2.0","id":"a","method":"initialize"}',
            "",
            '{"jsonrpc":"2.0","id":"b","method":"bogus"}',
            '{"jsonrpc":"2.0","id":"c","method":"tools/call","params":"x"}',
            '{"jsonrpc":"2.0","id":"d","method":"tools/list"}',
        ])

        assert [response["id"] for response in responses] == ["a", "b", "c", "d"]
        assert responses[1]["error"]["message"] == "Method not found"
        assert responses[2]["error"]["message"] == "Invalid params"

    @pytest.mark.parametrize("raw_id", ["null", "0", "12345678901234567890", '"id-\\u00e9"', "-1.5"])
    def test_id_round_trip(self, raw_id):
        """Test ids come back with the same JSON value."""
        responses = run_session(['{"jsonrpc":"2.0","id":%s,"method":"tools/list"}' % raw_id])

        assert responses[0]["id"] == json.loads(raw_id)

    def test_request_without_id(self):
        """Test a request without id is answered with a null id."""
        responses = run_session(['{"jsonrpc":"2.0","method":"tools/list"}'])

        assert "id" in responses[0]
        assert responses[0]["id"] is None

    def test_invalid_utf8_line_skipped(self):
        """Test a line with undecodable bytes is dropped and later lines are answered."""
        raw = (
            b'{"jsonrpc":"2.0","id":1,"method":"initialize"}\n'
            b"\xff\xfe bad\n"
            b'{"jsonrpc":"2.0","id":2,"method":"tools/list"}\n'
        )
        stdin = io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8")
        stdout = io.StringIO()

        MCPServer(StdioTransport(stdin=stdin, stdout=stdout), tool_registry=ToolRegistry([])).run()

        responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert [response["id"] for response in responses] == [1, 2]

    @pytest.mark.parametrize("arguments", ['"x"', '{"include_content":"no"}', "[true]"])
    def test_malformed_arguments_use_defaults(self, arguments):
        """Test unusable arguments fall back to the tool defaults."""
        responses = run_session([
            '{"jsonrpc":"2.0","id":4,"method":"tools/call",'
            '"params":{"name":"get_leetcode_daily_challenge","arguments":%s}}' % arguments
        ])

        assert "error" not in responses[0]
        text = responses[0]["result"]["content"][0]["text"]
        assert "**Problem Description:**" in text

    def test_crlf_line_endings(self):
        """Test carriage returns are stripped from lines."""
        responses = run_session(['{"jsonrpc":"2.0","id":1,"method":"initialize"}\r'])

        assert responses[0]["id"] == 1

    def test_unencodable_response_dropped(self, monkeypatch):
        """Test a response that cannot be serialized is dropped."""
        def bad_result(params):
            return {"value": {1, 2}}

        registry = ToolRegistry([])
        stdout = io.StringIO()
        stdin = io.StringIO(
            '{"id":1,"method":"tools/list"}\n{"id":2,"method":"initialize"}\n'
        )
        server = MCPServer(StdioTransport(stdin=stdin, stdout=stdout), tool_registry=registry)
        monkeypatch.setitem(server.protocol_handler._request_handlers, "tools/list", bad_result)

        server.run()

        lines = stdout.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["id"] == 2


class FailingReader(io.StringIO):
    """Input stream that fails after its first line."""

    def __init__(self, first_line):
        super().__init__(first_line)
        self._reads = 0

    def readline(self, *args):
        self._reads += 1
        if self._reads > 1:
            raise OSError("read failed")
        return super().readline(*args)


class TestServerLifecycle:
    """Test server startup, shutdown and transport failures."""

    def test_read_error_ends_loop(self):
        """Test a read failure stops the loop without raising."""
        stdout = io.StringIO()
        transport = StdioTransport(
            stdin=FailingReader('{"id":1,"method":"initialize"}\n'),
            stdout=stdout
        )

        MCPServer(transport, tool_registry=ToolRegistry([])).run()

        assert len(stdout.getvalue().splitlines()) == 1
        assert transport.closed

    def test_default_registry(self):
        """Test the server builds the LeetCode tool with its config."""
        config = {
            "server_name": "custom",
            "server_version": "2.0.0",
            "leetcode": {"base_url": "https://leetcode.example", "timeout": 5.0}
        }
        server = MCPServer(StdioTransport(stdin=io.StringIO(), stdout=io.StringIO()), config)

        tool = server.tool_registry.get_tool("get_leetcode_daily_challenge")
        assert isinstance(tool, LeetCodeDailyChallengeTool)
        assert tool.base_url == "https://leetcode.example"
        assert tool.client is server._http_client
        assert server.protocol_handler.server_info == {"name": "custom", "version": "2.0.0"}

        server.run()
        assert server._http_client is None

    def test_start_notice_is_debug(self):
        """Test the server itself logs its start below info level."""
        transport = StdioTransport(stdin=io.StringIO(), stdout=io.StringIO())

        with capture_logs() as logs:
            MCPServer(transport, tool_registry=ToolRegistry([])).run()

        started = [entry for entry in logs if entry["event"] == "MCP server started"]
        assert [entry["log_level"] for entry in started] == ["debug"]

    def test_context_manager(self):
        """Test start and stop through a with block."""
        stdin = io.StringIO('{"id":1,"method":"initialize"}\n')
        stdout = io.StringIO()
        transport = StdioTransport(stdin=stdin, stdout=stdout)

        with MCPServer(transport, tool_registry=ToolRegistry([])) as server:
            assert transport.connected
            server.serve()

        assert not transport.connected
        assert json.loads(stdout.getvalue())["id"] == 1


class TestStdioTransport:
    """Test the stdio transport directly."""

    def test_send_requires_connection(self):
        """Test writing before connect fails."""
        transport = StdioTransport(stdin=io.StringIO(), stdout=io.StringIO())

        with pytest.raises(TransportConnectionError):
            transport.send_line("{}")

    def test_send_line_appends_newline(self):
        """Test each message is written as one line."""
        stdout = io.StringIO()
        with StdioTransport(stdin=io.StringIO(), stdout=stdout) as transport:
            transport.send_line('{"a":1}')
            transport.send_line('{"b":2}')

        assert stdout.getvalue() == '{"a":1}\n{"b":2}\n'

    def test_write_failure(self):
        """Test a closed output stream raises MessageError."""
        stdout = io.StringIO()
        transport = StdioTransport(stdin=io.StringIO(), stdout=stdout)
        transport.connect()
        stdout.close()

        with pytest.raises(MessageError):
            transport.send_line("{}")

    def test_byte_streams_decode_leniently(self):
        """Test wrapped byte streams are switched to lenient UTF-8."""
        stdin = io.TextIOWrapper(io.BytesIO(b""), encoding="latin-1")
        stdout = io.TextIOWrapper(io.BytesIO(), encoding="ascii")

        with StdioTransport(stdin=stdin, stdout=stdout):
            assert stdin.encoding == "utf-8"
            assert stdin.errors == "replace"
            assert stdout.encoding == "utf-8"
