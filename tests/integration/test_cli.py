"""
Integration tests for the CLI commands.
"""

import json

import pytest
from typer.testing import CliRunner

from replay_runtime.engine.request_executor import RawResponse
from replay_runtime.exceptions import NetworkError
from replay_runtime.interfaces.transport import PreparedRequest


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def spec_file(tmp_path):
    path = tmp_path / "step_9_request.json"
    path.write_text(json.dumps({
        "url": "https://api.example.com/projects",
        "method": "get",
        "params": [{"key": "page", "value": "1"}],
        "auth": {"type": "bearer", "token": "abc"},
    }))
    return path


@pytest.fixture
def fake_send(monkeypatch):
    """Replace the network send with a canned response."""
    calls = []
    
    async def _send(spec, timeout, verify):
        calls.append((spec, timeout, verify))
        return RawResponse(
            status=200,
            status_text="OK",
            body={"total_projects": 5},
            request=PreparedRequest(
                method="GET",
                url="https://api.example.com/projects?page=1",
                headers={"Authorization": "Bearer abc"},
            ),
            duration_ms=8.0,
        )
    
    monkeypatch.setattr("replay_runtime.main._send", _send)
    return calls


def write_sources(tmp_path, data):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps(data))
    return path


class TestCLIVersion:
    """Test the 'version' CLI command."""
    
    def test_version(self, runner):
        from replay_runtime import __version__
        from replay_runtime.main import app
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestCLIRequest:
    """Test the 'request' CLI command."""
    
    def test_request_help(self, runner):
        from replay_runtime.main import app
        result = runner.invoke(app, ["request", "--help"])
        assert result.exit_code == 0
        assert "--export-dir" in result.stdout
    
    def test_request_prints_response(self, runner, spec_file, fake_send):
        from replay_runtime.main import app
        result = runner.invoke(app, ["request", str(spec_file), "--timeout", "5"])
        
        assert result.exit_code == 0
        assert "200 OK" in result.stdout
        assert "total_projects" in result.stdout
        spec, timeout, verify = fake_send[0]
        assert spec.auth.token == "abc"
        assert timeout == 5.0
        assert verify is True
    
    def test_request_exports(self, runner, spec_file, fake_send, tmp_path):
        from replay_runtime.main import app
        out_dir = tmp_path / "results"
        
        result = runner.invoke(app, ["request", str(spec_file), "-o", str(out_dir), "--step", "9"])
        
        assert result.exit_code == 0
        exported = out_dir / "api-execution" / "Step_9_api.json"
        data = json.loads(exported.read_text())
        assert data["response"]["body"] == {"payload": {"total_projects": 5}}
        assert data["request"]["headers"]["Authorization"] == "***"
    
    def test_request_missing_file(self, runner, tmp_path):
        from replay_runtime.main import app
        result = runner.invoke(app, ["request", str(tmp_path / "missing.json")])
        assert result.exit_code == 2
        assert "not found" in result.stdout.lower()
    
    def test_request_invalid_spec(self, runner, tmp_path, fake_send):
        from replay_runtime.main import app
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"method": "get"}))
        
        result = runner.invoke(app, ["request", str(path)])
        
        assert result.exit_code == 2
        assert fake_send == []
    
    def test_request_network_error(self, runner, spec_file, monkeypatch):
        from replay_runtime.main import app
        
        async def _send(spec, timeout, verify):
            raise NetworkError("Connection refused", url=spec.url, method="GET")
        
        monkeypatch.setattr("replay_runtime.main._send", _send)
        result = runner.invoke(app, ["request", str(spec_file)])
        
        assert result.exit_code == 1
        assert "Connection refused" in result.stdout


class TestCLIReconcile:
    """Test the 'reconcile' CLI command."""
    
    def test_sources_agree(self, runner, tmp_path, ui_fragments, db_row_sets, api_payloads):
        from replay_runtime.main import app
        path = write_sources(tmp_path, {"ui": ui_fragments, "db": db_row_sets, "api": api_payloads})
        
        result = runner.invoke(app, ["reconcile", str(path)])
        
        assert result.exit_code == 0
        assert "Sources agree" in result.stdout
    
    def test_sources_disagree(self, runner, tmp_path, ui_fragments, api_payloads):
        from replay_runtime.main import app
        path = write_sources(tmp_path, {"ui": ui_fragments, "db": [[{"count": 4}]], "api": api_payloads})
        
        result = runner.invoke(app, ["reconcile", str(path)])
        
        assert result.exit_code == 1
        assert "Sources disagree" in result.stdout
    
    def test_custom_fields(self, runner, tmp_path):
        from replay_runtime.main import app
        path = write_sources(tmp_path, {
            "ui": ["<b class='open'>2</b>"],
            "db": [[{"n": 2}]],
            "api": [{"payload": {"open": 2}}],
        })
        
        result = runner.invoke(app, [
            "reconcile", str(path),
            "--ui-marker", "open",
            "--db-field", "n",
            "--api-field", "open",
        ])
        
        assert result.exit_code == 0
    
    def test_invalid_sources(self, runner, tmp_path):
        from replay_runtime.main import app
        path = write_sources(tmp_path, {"ui": "<b>1</b>", "db": [], "api": []})
        
        result = runner.invoke(app, ["reconcile", str(path)])
        
        assert result.exit_code == 2
    
    def test_sources_not_an_object(self, runner, tmp_path):
        from replay_runtime.main import app
        path = write_sources(tmp_path, [1, 2, 3])
        
        result = runner.invoke(app, ["reconcile", str(path)])
        
        assert result.exit_code == 2
