"""End-to-end tests for the run pipeline and the CLI exit codes.

The browser, mailbox and portal are replaced by fakes; everything between
them is the real code.
"""

import pytest

from slot_checker import main as cli
from slot_checker.auth.login import SessionAuthenticator
from slot_checker.errors import AuthError, ConfigError
from slot_checker.notifications import Notifier, NotificationType
from slot_checker.reporting.report import build_report, load_report
from slot_checker.scanner import AvailabilityProbe, ProbeStatus
from slot_checker.scanner.locations import LOCATION_SELECT

from .fakes import FakeBrowserManager, FakeElement, RecordingChannel, StaticResolver

SEL = AvailabilityProbe.SELECTORS


def _portal(page):
    """Three offices: one with two slots, one full, one without the visa type."""
    page.present.update({SessionAuthenticator.SELECTORS["code"], LOCATION_SELECT, SEL["visa_type"]})
    page.options[LOCATION_SELECT] = [
        {"value": "", "text": "Select a location"},
        {"value": "SYD", "text": "Sydney"},
        {"value": "MEL", "text": "Melbourne"},
        {"value": "PER", "text": "Perth"},
    ]
    schengen = [{"value": "", "text": "Select"}, {"value": "sss", "text": "Short stay Schengen visa"}]
    visa_options = {"SYD": schengen, "MEL": schengen, "PER": [{"value": "nat", "text": "National visa"}]}

    def on_select(p, selector, value):
        if selector == LOCATION_SELECT:
            p.current = value
            p.options[SEL["visa_type"]] = visa_options[value]
            p.elements.pop(SEL["available_slot"], None)
            p.present.discard(SEL["no_slots"])
        elif p.current == "SYD":
            p.elements[SEL["available_slot"]] = [FakeElement("12 Jan"), FakeElement("15 Jan")]
        elif p.current == "MEL":
            p.present.add(SEL["no_slots"])

    page.current = None
    page.on_select = on_select
    return page


def _recording_notifier():
    notifier = Notifier()
    channel = RecordingChannel()
    notifier.add_channel(channel)
    return notifier, channel


class TestRunScan:
    @pytest.mark.asyncio
    async def test_three_office_scenario(self, page, settings) -> None:
        browser = FakeBrowserManager(_portal(page))
        notifier, channel = _recording_notifier()

        report = await cli.run_scan(settings, StaticResolver(), browser, notifier)

        assert [r.status for r in report.results] == [
            ProbeStatus.AVAILABLE,
            ProbeStatus.UNAVAILABLE,
            ProbeStatus.ERROR,
        ]
        assert report.results[0].dates == ["12 Jan", "15 Jan"]
        assert report.results[2].message == "Visa type not found"

        persisted = load_report(settings.results_file)
        assert persisted.summary.to_dict() == {
            "total": 3,
            "available": 1,
            "unavailable": 1,
            "uncertain": 0,
            "errors": 1,
        }
        assert browser.closed == 1
        assert len(channel.of_type(NotificationType.APPOINTMENT_FOUND)) == 1
        assert channel.of_type(NotificationType.ERROR) == []

    @pytest.mark.asyncio
    async def test_auth_failure_writes_nothing_and_closes_once(self, page, settings) -> None:
        browser = FakeBrowserManager(page)

        with pytest.raises(AuthError):
            await cli.run_scan(settings, StaticResolver(), browser, Notifier())

        assert not settings.results_file.exists()
        assert browser.opened == 1
        assert browser.closed == 1

    @pytest.mark.asyncio
    async def test_aborted_run_sends_error_notification(self, page, settings) -> None:
        notifier, channel = _recording_notifier()

        with pytest.raises(AuthError):
            await cli.run_scan(settings, StaticResolver(), FakeBrowserManager(page), notifier)

        [error] = channel.of_type(NotificationType.ERROR)
        assert "Login failed" in error.message
        assert channel.of_type(NotificationType.SCAN_COMPLETED) == []

    @pytest.mark.asyncio
    async def test_missing_credentials_never_opens_browser(self, page, settings) -> None:
        browser = FakeBrowserManager(page)
        settings = settings.model_copy(update={"password": None})

        with pytest.raises(ConfigError, match="VFS_PASSWORD"):
            await cli.run_scan(settings, StaticResolver(), browser, Notifier())

        assert browser.opened == 0


class TestMain:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch, tmp_path):
        for name in ("VFS_EMAIL", "VFS_PASSWORD", "VFS_OTP_MODE"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)

    def test_missing_credentials_exit_code(self, monkeypatch) -> None:
        async def fail_if_called(*args, **kwargs):
            raise AssertionError("scan must not start")

        monkeypatch.setattr(cli, "run_scan", fail_if_called)

        assert cli.main(["run", "--manual"]) == cli.EXIT_FAILURE

    def test_successful_run_exit_code(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("VFS_EMAIL", "traveller@example.com")
        monkeypatch.setenv("VFS_PASSWORD", "s3cret")
        seen = {}

        async def fake_run_scan(settings, resolver, notifier=None):
            seen["settings"] = settings
            seen["resolver"] = resolver
            return build_report([])

        monkeypatch.setattr(cli, "run_scan", fake_run_scan)

        code = cli.main(["run", "--manual", "--visa-type", "National visa", "--results-file", str(tmp_path / "r.json")])

        assert code == cli.EXIT_OK
        assert seen["settings"].visa_type == "National visa"
        assert seen["settings"].otp_mode == "manual"
        assert type(seen["resolver"]).__name__ == "InteractiveChallengeResolver"

    def test_fatal_auth_error_exit_code(self, monkeypatch) -> None:
        monkeypatch.setenv("VFS_EMAIL", "traveller@example.com")
        monkeypatch.setenv("VFS_PASSWORD", "s3cret")

        async def failing_run_scan(settings, resolver, notifier=None):
            raise AuthError("code field never appeared")

        monkeypatch.setattr(cli, "run_scan", failing_run_scan)

        assert cli.main(["run", "--manual"]) == cli.EXIT_FAILURE

    def test_unexpected_exception_exit_code(self, monkeypatch) -> None:
        monkeypatch.setenv("VFS_EMAIL", "traveller@example.com")
        monkeypatch.setenv("VFS_PASSWORD", "s3cret")

        async def crashing_run_scan(settings, resolver, notifier=None):
            raise RuntimeError("browser crashed")

        monkeypatch.setattr(cli, "run_scan", crashing_run_scan)

        assert cli.main(["run", "--manual"]) == cli.EXIT_FAILURE

    def test_gmail_mode_without_token_is_config_error(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("VFS_EMAIL", "traveller@example.com")
        monkeypatch.setenv("VFS_PASSWORD", "s3cret")
        monkeypatch.setenv("VFS_GMAIL_TOKEN_PATH", str(tmp_path / "missing-token.json"))

        assert cli.main([]) == cli.EXIT_FAILURE

    @pytest.mark.parametrize(
        "argv, expected",
        [
            ([], ["run"]),
            (["--manual"], ["run", "--manual"]),
            (["-v", "--visa-type", "National visa"], ["-v", "run", "--visa-type", "National visa"]),
            (["run", "--headed"], ["run", "--headed"]),
            (["setup-gmail"], ["setup-gmail"]),
            (["--help"], ["--help"]),
        ],
    )
    def test_run_is_the_default_command(self, argv, expected) -> None:
        assert cli.with_default_command(argv) == expected

    def test_run_flags_without_command(self, monkeypatch) -> None:
        monkeypatch.setenv("VFS_EMAIL", "traveller@example.com")
        monkeypatch.setenv("VFS_PASSWORD", "s3cret")
        seen = {}

        async def fake_run_scan(settings, resolver, notifier=None):
            seen["settings"] = settings
            return build_report([])

        monkeypatch.setattr(cli, "run_scan", fake_run_scan)

        assert cli.main(["--manual", "--visa-type", "National visa"]) == cli.EXIT_OK
        assert seen["settings"].otp_mode == "manual"
        assert seen["settings"].visa_type == "National visa"
