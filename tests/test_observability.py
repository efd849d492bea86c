import json


def test_obs_modules_exist():
    import timber.obs.context as ctx
    import timber.obs.logger as log

    assert hasattr(ctx, "request_id_var")
    assert hasattr(log, "log_event")


def test_log_event_writes_json_line(capsys):
    from timber.obs.logger import log_event
    log_event("sync_failed", level="ERROR", batch_size=3)
    payload = json.loads(capsys.readouterr().out.strip())
    assert payload["event"] == "sync_failed"
    assert payload["level"] == "ERROR"
    assert payload["batch_size"] == 3
    assert "ts" in payload


def test_log_event_redacts_api_key(capsys):
    from timber.obs.logger import log_event
    log_event("startup", api_key="sk_live_abcdef7890")
    captured = capsys.readouterr().out.strip()
    assert "***7890" in captured
    assert "abcdef" not in captured


def test_log_event_includes_request_id(capsys):
    from timber.obs.context import request_id_var
    from timber.obs.logger import log_event

    token = request_id_var.set("req-9")
    try:
        log_event("step")
    finally:
        request_id_var.reset(token)
    assert json.loads(capsys.readouterr().out)["request_id"] == "req-9"
