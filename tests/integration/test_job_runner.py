"""
Integration tests for the job runner and CLI.

Pages are served by an httpx.MockTransport so the full fetch, extract and
compare pipeline runs without a network or browser.
"""

import json

import httpx
import pytest

from baseline_cli import main as cli_main
from baseline_cli.output import print_results_summary
from baseline_engine.config import AuditConfig
from baseline_engine.fetcher import RawHTMLFetcher
from baseline_engine.job_runner import JobRunner
from baseline_engine.models import BaselineKind, PageTarget

PAGES = {
    "/": """
        <html><head>
        <title>Home</title>
        <meta name="description" content="Welcome">
        <script type="application/ld+json">{"@type": "WebSite", "name": "Acme"}</script>
        </head></html>
    """,
    "/about": """
        <html><head>
        <title>About</title>
        <script type="application/ld+json">{"@type": "Organization"}</script>
        <script type="application/ld+json">{"@type": "BreadcrumbList",}</script>
        </head></html>
    """,
}


class SiteTransport:
    """Serves PAGES, with overrides settable per test."""

    def __init__(self):
        self.pages = dict(PAGES)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        html = self.pages.get(request.url.path)
        if html is None:
            return httpx.Response(404, text="Not found")
        return httpx.Response(200, text=html)


@pytest.fixture
def site():
    return SiteTransport()


def _runner(tmp_path, site, kind=BaselineKind.META_TAGS, pages=None):
    config = AuditConfig(
        pages=pages
        or [
            PageTarget(name="home", url="https://example.com/"),
            PageTarget(name="about", url="https://example.com/about"),
        ],
        kind=kind,
        baseline_directory=tmp_path / "baselines",
        rendered=False,
    )
    fetcher = RawHTMLFetcher(transport=httpx.MockTransport(site))
    return JobRunner(config, fetcher=fetcher)


class TestJobRunner:
    """Tests for JobRunner class."""

    def test_first_run_creates_baselines(self, tmp_path, site):
        """Test that the first run passes and writes one baseline per page."""
        result = _runner(tmp_path, site).run_job()

        assert result.pages_processed == 2
        assert result.pages_passed == 2
        assert all(check.comparison.baseline_created for check in result.checks)

        data = json.loads((tmp_path / "baselines" / "home-baseline.json").read_text())
        assert data["metaTags"]["title"] == {"content": "Home"}
        assert data["metaTagCount"] == 2

    def test_detects_meta_tag_drift(self, tmp_path, site):
        """Test that a changed description fails the page on the next run."""
        _runner(tmp_path, site).run_job()
        site.pages["/"] = site.pages["/"].replace("Welcome", "Hello")

        result = _runner(tmp_path, site).run_job()

        home = next(check for check in result.checks if check.target.name == "home")
        assert home.passed is False
        assert home.comparison.differences == {
            "meta_description": {"baseline": "Welcome", "current": "Hello"}
        }
        assert result.get_checks_with_differences() == [home]

    def test_json_ld_parse_errors_recorded(self, tmp_path, site):
        """Test that broken JSON-LD is kept as data and compared stably."""
        _runner(tmp_path, site, kind=BaselineKind.JSON_LD).run_job()

        result = _runner(tmp_path, site, kind=BaselineKind.JSON_LD).run_job()

        about = next(check for check in result.checks if check.target.name == "about")
        assert about.extracted[1]["error"].startswith("Invalid JSON")
        assert about.passed is True

    def test_json_ld_new_block(self, tmp_path, site):
        """Test that an extra block is reported in new_data."""
        _runner(tmp_path, site, kind=BaselineKind.JSON_LD).run_job()
        site.pages["/"] = site.pages["/"].replace(
            "</head>", '<script type="application/ld+json">{"@type": "FAQPage"}</script></head>'
        )

        result = _runner(tmp_path, site, kind=BaselineKind.JSON_LD).run_job()

        home = next(check for check in result.checks if check.target.name == "home")
        assert home.comparison.new_data == [{"index": 1, "data": {"@type": "FAQPage"}}]

    def test_update_mode_overwrites(self, tmp_path, site):
        """Test that update mode accepts drift without comparing."""
        _runner(tmp_path, site).run_job()
        site.pages["/"] = site.pages["/"].replace("Welcome", "Hello")

        update = _runner(tmp_path, site).run_job(update=True)
        assert update.update_mode is True
        assert all(check.baseline_updated for check in update.checks)

        result = _runner(tmp_path, site).run_job()
        assert result.pages_failed == 0

    def test_fetch_error_fails_page(self, tmp_path, site):
        """Test that an unreachable page fails without a comparison."""
        pages = [PageTarget(name="gone", url="https://example.com/gone")]

        result = _runner(tmp_path, site, pages=pages).run_job()

        check = result.checks[0]
        assert check.success is False
        assert check.fetch_errors == ["HTTP status 404"]
        assert not (tmp_path / "baselines" / "gone-baseline.json").exists()

    def test_corrupt_baseline_fails_page(self, tmp_path, site):
        """Test that a storage failure fails only that page's check."""
        runner = _runner(tmp_path, site)
        (tmp_path / "baselines" / "home-baseline.json").write_text("{", encoding="utf-8")

        result = runner.run_job()

        home = next(check for check in result.checks if check.target.name == "home")
        about = next(check for check in result.checks if check.target.name == "about")
        assert home.success is False
        assert home.storage_errors
        assert about.passed is True

    def test_duplicate_page_names_skipped(self, tmp_path, site):
        """Test that repeated page names are processed once."""
        pages = [
            PageTarget(name="home", url="https://example.com/"),
            PageTarget(name="home", url="https://example.com/about"),
        ]

        result = _runner(tmp_path, site, pages=pages).run_job()

        assert result.pages_processed == 1


class TestCli:
    """Tests for the CLI wrapper."""

    def test_build_config_defaults(self, tmp_path):
        """Test that CLI arguments map onto AuditConfig."""
        env = tmp_path / "env.json"
        env.write_text(json.dumps({"prod_urls": {"home": "https://example.com/"}}))

        args = cli_main.parse_arguments(["compare", "-c", str(env), "--kind", "json-ld", "--raw"])
        config = cli_main.build_config(args)

        assert config.kind is BaselineKind.JSON_LD
        assert str(config.baseline_directory) == "fixtures/seo/seo_json_tags_baselines"
        assert config.rendered is False
        assert config.timeout == 60000

    def test_main_exits_nonzero_on_drift(self, tmp_path, site, monkeypatch, capsys):
        """Test the full CLI flow with a drifting page."""
        env = tmp_path / "env.json"
        env.write_text(json.dumps({"prod_urls": {"home": "https://example.com/"}}))
        baselines = tmp_path / "baselines"
        reports = tmp_path / "reports"

        def fake_default_fetcher(self, config):
            return RawHTMLFetcher(transport=httpx.MockTransport(site))

        monkeypatch.setattr(JobRunner, "_default_fetcher", fake_default_fetcher)
        argv = ["compare", "-c", str(env), "-b", str(baselines), "-o", str(reports), "--raw"]

        cli_main.main(argv)
        assert (baselines / "home-baseline.json").exists()

        site.pages["/"] = site.pages["/"].replace("Welcome", "Hello")
        with pytest.raises(SystemExit) as exc_info:
            cli_main.main(argv)

        assert exc_info.value.code == 1
        output = capsys.readouterr().out
        assert "Differences Detected: 1 / 1 pages" in output
        assert "Baseline: Welcome" in output
        assert len(list(reports.glob("*.json"))) >= 1

    def test_main_missing_config(self, tmp_path, capsys):
        """Test that a missing config file exits with an error."""
        with pytest.raises(SystemExit) as exc_info:
            cli_main.main(["compare", "-c", str(tmp_path / "missing.json")])

        assert exc_info.value.code == 1
        assert "Error loading config" in capsys.readouterr().err

    def test_print_summary_for_update(self, tmp_path, site, capsys):
        """Test summary output in update mode."""
        result = _runner(tmp_path, site).run_job(update=True)

        print_results_summary(result)

        output = capsys.readouterr().out
        assert "BASELINE UPDATE" in output
        assert "home-baseline.json" in output
