"""Command-line behaviour, with NSX Manager served by a mock transport."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import uvicorn

from ldapmerge.adapters.http_resilience import ResilientClient
from ldapmerge.adapters.sqlalchemy import shutdown
from ldapmerge.app import open_database, save_profile
from ldapmerge.domain.model import ConnectionProfile
from ldapmerge.ui import cli

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from ldapmerge.config import ResilienceConfig

CONNECTION = ["--host", "https://nsx.example.com", "-u", "admin", "-P", "pw"]

SOURCE = {
    "id": "example.lab",
    "domain_name": "example.lab",
    "base_dn": "DC=example,DC=lab",
    "ldap_servers": [{"url": "ldaps://a.example.lab:636", "enabled": True}],
}


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class FakeNsx:
    def __init__(self, *, fail_put: bool = False) -> None:
        self.fail_put = fail_put
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json={"results": [SOURCE], "result_count": 1})
        if request.method == "PUT":
            if self.fail_put:
                return httpx.Response(400, json={"error_code": 1, "error_message": "rejected"})
            return httpx.Response(200, content=request.content)
        if request.url.params.get("action") == "fetch_certificate":
            url = json.loads(request.content)["ldap_server_url"]
            return httpx.Response(200, json={"pem_encoded": f"PEM:{url}"})
        return httpx.Response(405)

    def client_factory(self) -> Callable[[ResilienceConfig], ResilientClient]:
        def build(config: ResilienceConfig) -> ResilientClient:
            return ResilientClient(config, transport=httpx.MockTransport(self))

        return build


def _exit_code(argv: list[str], **kwargs: Any) -> int:
    try:
        cli.main(argv, **kwargs)
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


def test_merge_prints_result(
    initial_file: Path, response_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = _exit_code(["merge", "-i", str(initial_file), "-r", str(response_file)])

    assert code == 0
    document = json.loads(capsys.readouterr().out)
    assert document[0]["ldap_servers"][0]["certificates"] == ["CERT-A1", "CERT-A2"]
    assert "certificates" not in document[0]["ldap_servers"][1]


def test_merge_writes_compact_output_file(
    tmp_path: Path,
    initial_file: Path,
    response_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    output = tmp_path / "out.json"

    code = _exit_code(
        ["merge", "-i", str(initial_file), "-r", str(response_file), "-o", str(output), "-c"]
    )

    assert code == 0
    assert "\n" not in output.read_text().strip()
    assert f"Output written to {output}" in capsys.readouterr().err


def test_invalid_input_exits_with_2(tmp_path: Path, response_file: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")

    assert _exit_code(["merge", "-i", str(broken), "-r", str(response_file)]) == 2


def test_missing_file_exits_with_1(tmp_path: Path, response_file: Path) -> None:
    missing = tmp_path / "absent.json"

    assert _exit_code(["merge", "-i", str(missing), "-r", str(response_file)]) == 1


def test_unknown_log_level_exits_with_2(initial_file: Path, response_file: Path) -> None:
    argv = ["--log-level", "loud", "merge", "-i", str(initial_file), "-r", str(response_file)]

    assert _exit_code(argv) == 2


def test_log_dir_that_is_a_file_exits_with_2(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    not_a_dir = tmp_path / "not-a-dir"
    not_a_dir.write_text("")

    assert _exit_code(["--log-dir", str(not_a_dir), "version"]) == 2
    assert "Error:" in capsys.readouterr().err


def test_fatal_error_is_reported_on_stderr_when_logging_to_a_file(
    tmp_path: Path, response_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    missing = tmp_path / "absent.json"
    log_dir = str(tmp_path / "logs")
    argv = ["--log-dir", log_dir, "merge", "-i", str(missing), "-r", str(response_file)]

    assert _exit_code(argv) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert "absent.json" in err


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert _exit_code(["version"]) == 0
    assert capsys.readouterr().out.startswith("ldapmerge ")


def test_sync_dry_run_does_not_push(
    response_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    nsx = FakeNsx()

    code = _exit_code(
        ["sync", *CONNECTION, "-r", str(response_file), "--dry-run"],
        client_factory=nsx.client_factory(),
    )

    assert code == 0
    assert [request.method for request in nsx.requests] == ["GET"]
    out = capsys.readouterr().out
    assert "Fetched 1 LDAP identity sources" in out
    assert "Sync completed (dry-run)" in out


def test_sync_can_fetch_certificates_from_nsx(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    nsx = FakeNsx()
    output = tmp_path / "merged.json"

    code = _exit_code(
        ["sync", *CONNECTION, "--fetch-certificates", "--dry-run", "-o", str(output)],
        client_factory=nsx.client_factory(),
    )

    assert code == 0
    assert [request.method for request in nsx.requests] == ["GET", "POST"]
    [domain] = json.loads(output.read_text())
    assert domain["ldap_servers"][0]["certificates"] == ["PEM:ldaps://a.example.lab:636"]
    assert "Fetched certificates for 1 of 1 LDAP servers" in capsys.readouterr().out


def test_sync_needs_a_certificate_source() -> None:
    nsx = FakeNsx()

    code = _exit_code(["sync", *CONNECTION, "--dry-run"], client_factory=nsx.client_factory())

    assert code == 2
    assert nsx.requests == []


def test_sync_pushes_with_certificates(response_file: Path) -> None:
    nsx = FakeNsx()

    code = _exit_code(
        ["sync", *CONNECTION, "-r", str(response_file)], client_factory=nsx.client_factory()
    )

    assert code == 0
    put = nsx.requests[-1]
    assert put.method == "PUT"
    body = json.loads(put.content)
    assert body["ldap_servers"][0]["certificates"] == ["CERT-A1", "CERT-A2"]


def test_sync_with_push_errors_exits_with_1(
    response_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    nsx = FakeNsx(fail_put=True)

    code = _exit_code(
        ["sync", *CONNECTION, "-r", str(response_file)], client_factory=nsx.client_factory()
    )

    assert code == 1
    assert "1 failed" in capsys.readouterr().out


def test_missing_credentials_exit_with_2() -> None:
    assert _exit_code(["nsx", "--host", "https://nsx", "pull"]) == 2


def test_nsx_pull_prints_domains(capsys: pytest.CaptureFixture[str]) -> None:
    nsx = FakeNsx()

    code = _exit_code(["nsx", *CONNECTION, "pull"], client_factory=nsx.client_factory())

    assert code == 0
    [domain] = json.loads(capsys.readouterr().out)
    assert domain["ldap_servers"][0] == {
        "url": "ldaps://a.example.lab:636",
        "starttls": "false",
        "enabled": "true",
    }


def test_nsx_connection_can_come_from_a_saved_profile(tmp_path: Path) -> None:
    db_path = tmp_path / "profiles.db"
    database = open_database(database_path=db_path)
    try:
        save_profile(
            database.unit_of_work,
            ConnectionProfile(
                name="lab", host="https://nsx.example.com", username="admin", password="pw"
            ),
        )
    finally:
        shutdown(database)
    nsx = FakeNsx()

    code = _exit_code(
        ["nsx", "--profile", "lab", "--db", str(db_path), "pull"],
        client_factory=nsx.client_factory(),
    )

    assert code == 0
    assert nsx.requests[0].url.host == "nsx.example.com"


def test_unknown_profile_exits_with_2(tmp_path: Path) -> None:
    argv = ["nsx", "--profile", "nope", "--db", str(tmp_path / "p.db"), "pull"]

    assert _exit_code(argv) == 2


def test_server_runs_uvicorn_with_the_app(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[dict[str, Any]] = []

    def fake_run(app: object, **kwargs: Any) -> None:
        calls.append({"app": app, **kwargs})

    monkeypatch.setattr(uvicorn, "run", fake_run)

    argv = ["server", "--host", "127.0.0.1", "-p", "9999", "--db", str(tmp_path / "s.db")]

    code = _exit_code(argv)

    assert code == 0
    [call] = calls
    assert call["host"] == "127.0.0.1"
    assert call["port"] == 9999
    assert call["app"].state.database is not None
