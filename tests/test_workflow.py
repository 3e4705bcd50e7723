import json

import httpx
import pytest

from client import ClientConfig, ConvertResult, render_result
from client.workflow import (
    Converted,
    Fail,
    PollResult,
    Reset,
    Select,
    Submit,
    Uploaded,
    transition,
)
from models import Phase, UploadSession


HEALTH_OK = httpx.Response(200, json={"status": "Server is running"})
UPLOAD_OK = httpx.Response(200, json={"message": "File uploaded successfully",
                                      "filename": "mod_1.jar", "originalName": "mod1.jar"})
JAR_CONTENT = b"\x00" * 10 * 1024


# ============================================================
# transition()
# ============================================================

class TestTransition:
    config = ClientConfig(base_url="http://testserver")
    poll_config = ClientConfig(base_url="http://testserver", post_upload="poll")

    def test_select_valid_file(self):
        session = transition(UploadSession(), Select("example.jar"), self.config)
        assert session.phase == Phase.SELECTING
        assert session.filename == "example.jar"

    def test_select_invalid_file_returns_to_idle(self):
        selected = transition(UploadSession(), Select("example.jar"), self.config)
        session = transition(selected, Select("example.zip"), self.config)
        assert session.phase == Phase.IDLE
        assert session.filename is None
        assert ".jar" in session.message

    def test_submit_without_version_fails(self):
        selected = transition(UploadSession(), Select("example.jar"), self.config)
        session = transition(selected, Submit("  "), self.config)
        assert session.phase == Phase.ERROR
        assert session.message == "Please select a version"

    def test_submit_without_selection_fails(self):
        session = transition(UploadSession(), Submit("1.20"), self.config)
        assert session.phase == Phase.ERROR
        assert session.message == "Please select a file first"

    def test_convert_path_progress(self):
        session = transition(UploadSession(), Select("example.jar"), self.config)
        session = transition(session, Submit("1.20"), self.config)
        assert (session.phase, session.progress) == (Phase.UPLOADING, 25)
        session = transition(session, Uploaded("mod1.jar"), self.config)
        assert (session.phase, session.progress) == (Phase.CONVERTING, 50)
        session = transition(session, Converted(ConvertResult()), self.config)
        assert (session.phase, session.progress) == (Phase.COMPLETE, 100)

    def test_poll_path_progress(self):
        session = transition(UploadSession(), Select("example.jar"), self.poll_config)
        session = transition(session, Submit("1.20"), self.poll_config)
        assert session.progress == 0
        session = transition(session, Uploaded("mod1.jar"), self.poll_config)
        assert (session.phase, session.progress) == (Phase.POLLING, 50)

        session = transition(session, PollResult({"success": True, "logs": ["x"]}), self.poll_config)
        assert session.phase == Phase.POLLING

        session = transition(session, PollResult({"success": True, "diffReport": ["+ a"]}), self.poll_config)
        assert (session.phase, session.progress) == (Phase.COMPLETE, 100)

    def test_fail_from_any_active_phase(self):
        session = transition(UploadSession(), Select("example.jar"), self.config)
        session = transition(session, Submit("1.20"), self.config)
        failed = transition(session, Fail("Error: boom"), self.config)
        assert failed.phase == Phase.ERROR
        assert failed.progress == session.progress

    def test_fail_from_idle_is_invalid(self):
        with pytest.raises(ValueError):
            transition(UploadSession(), Fail("boom"), self.config)

    def test_out_of_order_event_is_invalid(self):
        selected = transition(UploadSession(), Select("example.jar"), self.config)
        with pytest.raises(ValueError):
            transition(selected, Converted(ConvertResult()), self.config)

    def test_reset(self):
        session = transition(UploadSession(), Select("example.jar"), self.config)
        assert transition(session, Reset(), self.config) == UploadSession()


# ============================================================
# UploadWorkflow
# ============================================================

def test_upload_then_convert_end_to_end(make_workflow):
    workflow, backend, sleeps = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/convert": httpx.Response(200, json={"added": ["x"], "removed": [], "modified": []}),
    })

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.COMPLETE
    assert session.progress == 100
    assert render_result(session.result) == "Changes found: added=1, removed=0, modified=0"
    assert backend.paths() == ["/api/health", "/api/upload", "/api/convert"]
    assert sleeps == [5.0]

    upload_request = backend.requests[1]
    assert b'filename="mod1.jar"' in upload_request.content
    assert b'name="targetVersion"' in upload_request.content
    assert b"1.20" in upload_request.content
    assert json.loads(backend.requests[2].content) == {"version": "1.20"}

    assert session.assigned_name == "mod1.jar"
    assert workflow.mapping.lookup("mod1.jar") == "example.jar"


def test_progress_is_reported_monotonically(make_workflow):
    workflow, _, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/convert": httpx.Response(200, json={"message": "Conversion completed successfully!"}),
    })
    progress = []
    workflow.on_change = lambda s: progress.append(s.progress)

    workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert progress == [0, 25, 50, 100]


def test_failing_health_check_prevents_upload(make_workflow):
    workflow, backend, _ = make_workflow({
        "/api/health": httpx.Response(503, json={"error": "down"}),
        "/api/upload": UPLOAD_OK,
    })

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.ERROR
    assert backend.paths() == ["/api/health"]
    assert len(workflow.mapping) == 0


def test_health_check_can_be_disabled(make_workflow):
    workflow, backend, _ = make_workflow({
        "/api/upload": UPLOAD_OK,
        "/api/convert": httpx.Response(200, json={"added": [], "removed": [], "modified": []}),
    }, check_health=False)

    assert workflow.run("example.jar", JAR_CONTENT, "1.20").phase == Phase.COMPLETE
    assert backend.paths() == ["/api/upload", "/api/convert"]


def test_upload_failure_is_not_retried_and_message_is_generic(make_workflow):
    workflow, backend, sleeps = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": httpx.Response(500, json={"error": "File upload failed"}),
    })

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.ERROR
    assert session.message == "Error: Upload failed. Please try again."
    assert backend.paths() == ["/api/health", "/api/upload"]
    assert sleeps == []


def test_conversion_failure(make_workflow):
    workflow, backend, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/convert": httpx.Response(500, json={"error": "Internal server error."}),
    })

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.ERROR
    assert session.message == "Error: Conversion failed. Please try again."
    assert backend.paths().count("/api/convert") == 1


def test_network_error(make_workflow):
    def _refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    workflow, _, _ = make_workflow({"/api/health": _refuse})

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.ERROR
    assert "Network error" in session.message


def test_invalid_file_type_sends_nothing(make_workflow):
    workflow, backend, _ = make_workflow({"/api/health": HEALTH_OK})

    session = workflow.run("example.zip", b"zip", "1.20")

    assert session.phase == Phase.IDLE
    assert session.filename is None
    assert backend.requests == []


def test_missing_version_sends_nothing(make_workflow):
    workflow, backend, _ = make_workflow({"/api/health": HEALTH_OK})

    session = workflow.run("example.jar", JAR_CONTENT, "")

    assert session.phase == Phase.ERROR
    assert session.message == "Please select a version"
    assert backend.requests == []


def test_timestamp_strategy(make_workflow, monkeypatch):
    workflow, backend, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/convert": httpx.Response(200, json={}),
    }, rename_strategy="timestamp")
    monkeypatch.setattr(workflow.renamer, "clock", lambda: 1_700_000_000.5)

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.assigned_name == "mod1700000000500.jar"
    assert workflow.mapping.lookup("mod1700000000500.jar") == "example.jar"


def test_poll_variant_completes_when_report_arrives(make_workflow):
    workflow, backend, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/logs/version-comparison": [
            httpx.Response(200, json={"success": True, "logs": ["decompiling"]}),
            httpx.Response(503),
            httpx.Response(200, json={"success": True, "logs": ["done"], "diffReport": ["+ a", "- b"]}),
        ],
    }, post_upload="poll")

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.COMPLETE
    assert session.progress == 100
    assert render_result(session.result) == "+ a\n- b"
    assert backend.paths().count("/api/logs/version-comparison") == 3
    assert "/api/convert" not in backend.paths()


def test_poll_variant_gives_up_after_max_retries(make_workflow):
    workflow, backend, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/logs/version-comparison": httpx.Response(500),
    }, post_upload="poll", max_retries=3)

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.ERROR
    assert session.message == "Error: Lost connection to the server. Please try again later."
    assert backend.paths().count("/api/logs/version-comparison") == 3


def test_poll_variant_non_json_body_counts_as_retry(make_workflow):
    workflow, backend, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/logs/version-comparison": httpx.Response(200, text="<html>waking up</html>"),
    }, post_upload="poll", max_retries=3)

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.ERROR
    assert session.message == "Error: Lost connection to the server. Please try again later."
    assert backend.paths().count("/api/logs/version-comparison") == 3


def test_poll_variant_recovers_after_non_json_body(make_workflow):
    workflow, backend, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/logs/version-comparison": [
            httpx.Response(200, text="<html>waking up</html>"),
            httpx.Response(200, json=["not", "an", "object"]),
            httpx.Response(200, json={"success": True, "diffReport": ["+ a"]}),
        ],
    }, post_upload="poll", max_retries=3)

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.COMPLETE
    assert render_result(session.result) == "+ a"
    assert backend.paths().count("/api/logs/version-comparison") == 3


def test_non_json_conversion_response_fails_cleanly(make_workflow):
    workflow, _, _ = make_workflow({
        "/api/health": HEALTH_OK,
        "/api/upload": UPLOAD_OK,
        "/api/convert": httpx.Response(200, text="Conversion completed"),
    })

    session = workflow.run("example.jar", JAR_CONTENT, "1.20")

    assert session.phase == Phase.ERROR
    assert session.message == "Error: Conversion failed. Please try again."
