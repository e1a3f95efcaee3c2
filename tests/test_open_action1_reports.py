"""
Tests for the Action1 report URL composer
"""

import os
import webbrowser
from unittest.mock import Mock, patch

import pytest

from action1_client import Action1Client
from bridge_engine import EXIT_ABORTED, EXIT_PARTIAL, Config, run_bridge
from bridge_errors import RunCancelled
from open_action1_reports import REPORT_CATALOG, build_report_urls, open_reports, open_urls


def test_catalog_has_fifteen_reports():
    assert len(REPORT_CATALOG) == 15
    assert len(set(REPORT_CATALOG)) == 15


def test_first_url_is_deterministic():
    urls = build_report_urls("12345")
    assert urls[0] == (
        "https://app.action1.com/console/reports/web_browsers_1635330143409/summary"
        "?details=yes&from=0&limit=100&live_only=no&org=12345"
    )


def test_every_url_is_scoped_to_the_org_in_catalog_order():
    urls = build_report_urls("4821")
    assert len(urls) == 15
    assert all(url.endswith("&org=4821") for url in urls)
    assert [u.split("/reports/")[1].rsplit("&org=", 1)[0] for u in urls] == REPORT_CATALOG
    assert build_report_urls("4821") == urls


def test_region_and_custom_catalog():
    urls = build_report_urls("9", catalog=["custom_1/summary"], region="Europe")
    assert urls == ["https://app.eu.action1.com/console/reports/custom_1/summary?org=9"]


def test_launch_failure_does_not_stop_remaining(executing_report):
    launcher = Mock()
    launcher.open.side_effect = [True, webbrowser.Error("could not locate runnable browser"), True]
    urls = ["https://a/1", "https://a/2", "https://a/3"]

    with patch("open_action1_reports.webbrowser.get", return_value=launcher):
        open_urls(urls, executing_report)

    assert launcher.open.call_count == 3
    assert executing_report.successes == ["https://a/1", "https://a/3"]
    assert [f.item for f in executing_report.failures] == ["https://a/2"]


def test_named_browser_is_requested(executing_report):
    launcher = Mock()
    launcher.open.return_value = True
    with patch("open_action1_reports.webbrowser.get", return_value=launcher) as get:
        open_urls(["https://a/1"], executing_report, browser="firefox")
    get.assert_called_once_with("firefox")


def test_declined_confirmation_opens_nothing(context, executing_report):
    context.action1 = Action1Client("NorthAmerica", "4821")
    with patch("builtins.input", return_value="n"), \
            patch("open_action1_reports.webbrowser.get") as get:
        with pytest.raises(RunCancelled):
            open_reports(context, executing_report)
    get.assert_not_called()


def test_configured_catalog_replaces_built_in_reports(context, executing_report):
    context.action1 = Action1Client("NorthAmerica", "4821")
    context.config.raw["action1"] = {"report_catalog": ["patch_status_1700000000000/summary"]}
    launcher = Mock()
    launcher.open.return_value = True
    with patch("builtins.input", return_value="y"), \
            patch("open_action1_reports.webbrowser.get", return_value=launcher):
        open_reports(context, executing_report)

    launcher.open.assert_called_once_with(
        "https://app.action1.com/console/reports/patch_status_1700000000000/summary?org=4821", new=2)

def test_acme_corp_end_to_end(hudu):
    """Acme Corp -> id_number 4821 -> 15 URLs; one launch fails, the other 14 are still attempted"""
    hudu.find_companies_by_name.return_value = [{"id": 7, "name": "Acme Corp", "id_number": "4821"}]
    launcher = Mock()
    launcher.open.side_effect = [True] * 3 + [OSError("browser crashed")] + [True] * 11
    inputs = ["acme.huducloud.com", "Acme Corp", "", "y"]

    with patch.dict(os.environ, {"HUDU_API_KEY": "k"}), \
            patch("bridge_engine.HuduClient", return_value=hudu), \
            patch("builtins.input", side_effect=inputs), \
            patch("open_action1_reports.webbrowser.get", return_value=launcher):
        code = run_bridge("Open Action1 reports", open_reports, config=Config(),
                          need_action1=True, authenticate_action1=False)

    assert code == EXIT_PARTIAL
    opened = [c.args[0] for c in launcher.open.call_args_list]
    assert len(opened) == 15
    assert all(url.endswith("&org=4821") for url in opened)
    hudu.find_companies_by_name.assert_called_once_with("Acme Corp")


def test_no_action1_credentials_needed_for_reports(hudu):
    hudu.find_companies_by_name.return_value = [{"id": 7, "name": "Acme Corp", "id_number": "4821"}]
    env = {"HUDU_API_KEY": "k", "ACTION1_API_KEY": "", "ACTION1_API_SECRET": ""}
    with patch.dict(os.environ, env), \
            patch("bridge_engine.HuduClient", return_value=hudu), \
            patch("bridge_engine.getpass.getpass") as secret_prompt, \
            patch("builtins.input", side_effect=["acme.huducloud.com", "Acme Corp", "", "n"]):
        code = run_bridge("Open Action1 reports", open_reports, config=Config(),
                          need_action1=True, authenticate_action1=False)

    secret_prompt.assert_not_called()
    assert code == EXIT_ABORTED
