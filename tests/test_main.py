import json

import pytest
from conftest import FakeResponse, FakeSession
from test_strategies import ARC_RAIDERS_HTML

import main
from news2discord.config import load_config
from news2discord.errors import ConfigError

CONFIG_YAML = """
sites:
  - name: arc-raiders
    strategy: arc_raiders
    webhook_env: DISCORD_ARCRAIDERS_WEBHOOK
    state_file: state/arc-raiders.json
  - name: nightreign
    strategy: nightreign
    webhook_env: DISCORD_NIGHTREIGN_WEBHOOK
    state_file: state/nightreign.json
"""

WEBHOOK = "https://discord.com/api/webhooks/1/token"


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


@pytest.fixture
def posts(monkeypatch):
    sent = []

    def fake_post(self, article):
        sent.append(article.url)
        return True

    monkeypatch.setattr(main.DiscordNotifier, "post", fake_post)
    return sent


def make_app(config_path, html, sleeper, environ=None):
    environ = environ if environ is not None else {"DISCORD_ARCRAIDERS_WEBHOOK": WEBHOOK}
    app = main.NewsToDiscord(load_config(config_path, environ={}), environ=environ, sleep=sleeper)
    app.session = FakeSession([FakeResponse(200, text=html)])
    return app


def test_cold_start_then_new_article(config_path, tmp_path, sleeper, posts):
    state_path = tmp_path / "state" / "arc-raiders.json"

    app = make_app(config_path, ARC_RAIDERS_HTML, sleeper)
    assert app.run(["arc-raiders"]) == main.EXIT_OK
    assert posts == []
    assert json.loads(state_path.read_text(encoding="utf-8")) == {
        "last_published": "2026-01-13T00:00:00.000Z",
        "posted_urls": ["https://arcraiders.com/news/patch-1-2"],
    }

    newer = ARC_RAIDERS_HTML.replace(
        '<div class="news-article-grid_newsArticleGrid__x1Y2z">',
        '<div class="news-article-grid_newsArticleGrid__x1Y2z">'
        '<a class="news-article-card_container__AbC12" href="/news/season-2">'
        '<div class="news-article-card_title__Qq1">Season 2</div>'
        '<div class="news-article-card_date__Zz9">January 13, 2026</div></a>',
    )
    app = make_app(config_path, newer, sleeper)
    assert app.run(["arc-raiders"]) == main.EXIT_OK
    assert posts == ["https://arcraiders.com/news/season-2"]
    assert json.loads(state_path.read_text(encoding="utf-8"))["posted_urls"] == [
        "https://arcraiders.com/news/patch-1-2",
        "https://arcraiders.com/news/season-2",
    ]


def test_structural_error_exits_non_zero(config_path, tmp_path, sleeper, posts):
    app = make_app(config_path, "<html><body>maintenance</body></html>", sleeper)
    assert app.run(["arc-raiders"]) == main.EXIT_STRUCTURE_ERROR
    assert not (tmp_path / "state" / "arc-raiders.json").exists()


def test_fetch_failure_exits_zero(config_path, tmp_path, sleeper, posts):
    app = make_app(config_path, "", sleeper)
    app.session = FakeSession([FakeResponse(503)])

    assert app.run(["arc-raiders"]) == main.EXIT_OK
    assert len(app.session.calls) == 3
    assert not (tmp_path / "state" / "arc-raiders.json").exists()


def test_missing_webhook_fails_before_any_site_runs(config_path, sleeper, posts):
    app = make_app(config_path, ARC_RAIDERS_HTML, sleeper)
    with pytest.raises(ConfigError, match="DISCORD_NIGHTREIGN_WEBHOOK"):
        app.run()
    assert app.session.calls == []


def test_unknown_strategy(tmp_path, sleeper):
    path = tmp_path / "config.yaml"
    path.write_text(
        "sites:\n  - {name: x, strategy: rss, webhook: https://hook}\n",
        encoding="utf-8",
    )
    app = main.NewsToDiscord(load_config(path, environ={}), environ={}, sleep=sleeper)
    with pytest.raises(ConfigError, match="Unknown strategy 'rss'"):
        app.build_pipelines()


def test_main_returns_config_error_code(config_path, monkeypatch):
    monkeypatch.delenv("DISCORD_ARCRAIDERS_WEBHOOK", raising=False)
    assert main.main(["--config", str(config_path), "--site", "arc-raiders"]) == main.EXIT_CONFIG_ERROR


def test_main_missing_config_file(tmp_path):
    assert main.main(["--config", str(tmp_path / "nope.yaml")]) == main.EXIT_CONFIG_ERROR
