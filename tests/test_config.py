import pytest

from smb_invoicing.config import default_app_config, load_app_config


def _write(tmp_path, content: str):
    path = tmp_path / "smb_invoicing_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_full_config(tmp_path) -> None:
    (tmp_path / "secrets").mkdir()
    (tmp_path / "secrets" / "token").write_text("aaa.bbb.ccc\n", encoding="utf-8")
    path = _write(
        tmp_path,
        """
[api]
base_url = "https://invoices.example.com"
timeout = 3

[auth]
token_file = "secrets/token"

[report]
paid_period = "last-month"
unpaid_period = "all"
currency = "Euro"
timezone = "Europe/Paris"

[people]
page_size = 10

[display]
mode = "both"
decimals = 0

[logging]
level = "debug"
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.api.base_url == "https://invoices.example.com"
    assert cfg.api.timeout == 3.0
    assert cfg.api.token == "aaa.bbb.ccc"
    assert cfg.report.paid_period == "lastMonth"
    assert cfg.report.unpaid_period is None
    assert cfg.report.proforma_period == "thisYear"
    assert cfg.report.currency == "Euro"
    assert cfg.report.timezone == "Europe/Paris"
    assert cfg.page_size == 10
    assert cfg.display_mode == "both"
    assert cfg.decimals == 0
    assert cfg.log_level == "DEBUG"


def test_minimal_config_uses_defaults(tmp_path) -> None:
    cfg = load_app_config(str(_write(tmp_path, "")))

    assert cfg == default_app_config()


def test_inline_token_wins_over_token_file(tmp_path) -> None:
    path = _write(tmp_path, '[auth]\ntoken = "x.y.z"\ntoken_file = "missing"\n')
    assert load_app_config(str(path)).api.token == "x.y.z"


def test_missing_config_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


def test_missing_token_file(tmp_path) -> None:
    path = _write(tmp_path, '[auth]\ntoken_file = "missing"\n')
    with pytest.raises(FileNotFoundError):
        load_app_config(str(path))


@pytest.mark.parametrize(
    "content",
    [
        "this is = not [toml",
        '[report]\npaid_period = "fortnight"\n',
        '[api]\ntimeout = "soon"\n',
        '[people]\npage_size = 0\n',
        '[display]\nmode = "pdf"\n',
    ],
)
def test_invalid_configs_raise_value_error(tmp_path, content) -> None:
    with pytest.raises(ValueError):
        load_app_config(str(_write(tmp_path, content)))
