from conftest import FakeResponse, FakeSession, article, day

from news2discord.notifier import DiscordNotifier, format_message

WEBHOOK = "https://discord.com/api/webhooks/1/token"


def make_notifier(script, sleeper, **kwargs):
    session = FakeSession(script)
    return DiscordNotifier(WEBHOOK, session, sleep=sleeper, **kwargs), session


def test_posts_title_and_url(sleeper):
    notifier, session = make_notifier([FakeResponse(204)], sleeper)

    assert notifier.post(article("patch-notes", day(3), title="Patch Notes 1.2"))

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", WEBHOOK)
    assert kwargs["json"] == {"content": "**Patch Notes 1.2**\nhttps://x/patch-notes"}
    assert kwargs["headers"] == {"Content-Type": "application/json"}


def test_format_message():
    assert format_message(article("a", day(1), title="Hello")) == "**Hello**\nhttps://x/a"


def test_rate_limit_honours_retry_after_header(sleeper):
    notifier, session = make_notifier(
        [FakeResponse(429, headers={"Retry-After": "2.5"}), FakeResponse(200)],
        sleeper,
    )

    assert notifier.post(article("a", day(1)))
    assert len(session.calls) == 2
    assert sleeper.waits == [2.5]


def test_rate_limit_falls_back_to_body_then_default(sleeper):
    notifier, session = make_notifier(
        [
            FakeResponse(429, json_body={"retry_after": 0.75}),
            FakeResponse(429),
            FakeResponse(204),
        ],
        sleeper,
        default_retry_after=5.0,
    )

    assert notifier.post(article("a", day(1)))
    assert sleeper.waits == [0.75, 5.0]


def test_rate_limit_retries_are_bounded(sleeper):
    notifier, session = make_notifier([FakeResponse(429)], sleeper, max_retries=3)

    assert notifier.post(article("a", day(1))) is False
    assert len(session.calls) == 4
    assert len(sleeper.waits) == 3


def test_other_errors_are_not_retried(sleeper):
    notifier, session = make_notifier([FakeResponse(400, text="bad request")], sleeper)

    assert notifier.post(article("a", day(1))) is False
    assert len(session.calls) == 1
    assert sleeper.waits == []


def test_network_error_is_a_failure(sleeper, connection_error):
    notifier, _ = make_notifier([connection_error], sleeper)
    assert notifier.post(article("a", day(1))) is False


def test_dry_run_sends_nothing(sleeper):
    notifier, session = make_notifier([FakeResponse(500)], sleeper, dry_run=True)
    assert notifier.post(article("a", day(1)))
    assert session.calls == []
