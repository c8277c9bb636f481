"""
Tests for CLI module.

Tests command-line interface commands and output. The batch pipeline
is replaced with a stub so no browser or network is used.
"""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from product_scout import __version__
from product_scout.cli import app
from product_scout.cli import main as cli_main
from product_scout.pipeline import DiscoveryResult


@pytest.fixture
def runner() -> CliRunner:
    """Provide a CLI test runner."""
    return CliRunner()


@pytest.fixture
def batch_calls(monkeypatch, temp_dir: Path):
    """Replace run_batch with a stub that records its arguments."""
    calls = []

    async def fake_run_batch(urls, settings):
        calls.append((list(urls), settings))
        results = []
        for url in urls:
            domain = url.split("://")[-1].strip("/")
            if domain.startswith("empty"):
                results.append(DiscoveryResult(seed_url=url, domain=domain))
            else:
                results.append(DiscoveryResult(
                    seed_url=url,
                    domain=domain,
                    product_urls={f"https://{domain}/products/1"},
                    source="sitemap",
                    output_path=temp_dir / f"{domain}.txt",
                ))
        return results

    monkeypatch.setattr(cli_main, "run_batch", fake_run_batch)
    return calls


class TestCLI:
    """Tests for general CLI behaviour."""

    def test_cli_help(self, runner: CliRunner):
        """CLI should show help."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, runner: CliRunner):
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_discover_help(self, runner: CliRunner):
        """Discover command should show help."""
        result = runner.invoke(app, ["discover", "--help"])

        assert result.exit_code == 0
        assert "--links-limit" in result.output


class TestDiscoverCommand:
    """Tests for the discover command."""

    def test_no_urls_fails(self, runner: CliRunner, batch_calls):
        """Discover without any storefront is an error."""
        result = runner.invoke(app, ["discover"])

        assert result.exit_code == 1
        assert batch_calls == []

    def test_discover_prints_summary(self, runner: CliRunner, batch_calls):
        """Results are summarised per storefront."""
        result = runner.invoke(app, ["discover", "https://shop.test"])

        assert result.exit_code == 0
        assert "shop.test" in result.output
        assert "sitemap" in result.output

    def test_options_override_settings(self, runner: CliRunner, batch_calls, temp_dir):
        """Command options are applied to the loaded settings."""
        result = runner.invoke(app, [
            "discover", "https://shop.test",
            "--links-limit", "25",
            "--workers", "4",
            "--no-headless",
            "--output-dir", str(temp_dir),
        ])

        assert result.exit_code == 0
        _, settings = batch_calls[0]
        assert settings.crawler.links_limit == 25
        assert settings.crawler.workers == 4
        assert settings.browser.headless is False
        assert settings.output.output_dir == temp_dir

    def test_input_file(self, runner: CliRunner, batch_calls, temp_dir):
        """Seeds from --input are added to the arguments."""
        seeds = temp_dir / "seeds.txt"
        seeds.write_text("https://a.test\n# skipped\nhttps://b.test\n")

        result = runner.invoke(app, ["discover", "https://c.test", "--input", str(seeds)])

        assert result.exit_code == 0
        urls, _ = batch_calls[0]
        assert urls == ["https://c.test", "https://a.test", "https://b.test"]

    def test_nothing_found_exit_code(self, runner: CliRunner, batch_calls):
        """A run that finds nothing anywhere exits non-zero."""
        result = runner.invoke(app, ["discover", "https://empty.test"])

        assert result.exit_code == 1
        assert "No product URLs found for empty.test" in result.output

    def test_bad_config_file(self, runner: CliRunner, batch_calls, temp_dir):
        """An invalid config file is reported."""
        config = temp_dir / "config.yaml"
        config.write_text("- not\n- a mapping\n")

        result = runner.invoke(app, ["discover", "https://shop.test", "--config", str(config)])

        assert result.exit_code == 1
        assert batch_calls == []


class TestConfigCommand:
    """Tests for the config command."""

    def test_config_show(self, runner: CliRunner):
        """Config --show displays settings."""
        result = runner.invoke(app, ["config", "--show"])

        assert result.exit_code == 0
        assert "crawler" in result.output
        assert "links_limit" in result.output

    def test_config_init(self, runner: CliRunner, temp_dir: Path):
        """Config --init writes the default settings as YAML."""
        output = temp_dir / "product-scout.yaml"

        result = runner.invoke(app, ["config", "--init", "--output", str(output)])

        assert result.exit_code == 0
        data = yaml.safe_load(output.read_text())
        assert data["crawler"]["links_limit"] == 200
        assert data["batch"]["input_link_workers"] == 2
