import json

import httpx

from repotest.infrastructure.notify import LogNotifier, WebhookNotifier, webhook_url


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_posts_username_and_content():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    notifier = WebhookNotifier("https://hooks.example/abc", client=_client(handler))
    result = notifier.send("🎉 Test passed for todo")
    assert result.delivered is True
    assert result.status_code == 204
    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert seen[0].headers["content-type"] == "application/json"
    assert json.loads(seen[0].content) == {
        "username": "Test Bot",
        "content": "🎉 Test passed for todo",
    }


def test_error_status_is_reported_not_raised():
    notifier = WebhookNotifier(
        "https://hooks.example/abc",
        username="CI",
        client=_client(lambda request: httpx.Response(500, text="boom")),
    )
    result = notifier.send("x")
    assert result.delivered is False
    assert result.status_code == 500


def test_transport_error_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    result = WebhookNotifier("https://hooks.example/abc", client=_client(handler)).send("x")
    assert result.delivered is False
    assert "refused" in result.error_message


def test_empty_url_attempt_fails_quietly():
    result = WebhookNotifier("").send("x")
    assert result.delivered is False


def test_webhook_url_missing_warns(monkeypatch, caplog):
    monkeypatch.delenv("DISCORD_WEBHOOK_URL", raising=False)
    with caplog.at_level("WARNING"):
        assert webhook_url() == ""
    assert any("DISCORD_WEBHOOK_URL not set" in r.getMessage() for r in caplog.records)


def test_webhook_url_from_env(monkeypatch):
    monkeypatch.setenv("HOOK", "https://hooks.example/x")
    assert webhook_url("HOOK") == "https://hooks.example/x"


def test_log_notifier_records():
    n = LogNotifier()
    assert n.send("hello").delivered
    assert n.messages == ["hello"]
