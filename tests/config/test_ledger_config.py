"""
Tests for ledger configuration loading (``ledger_config``).

Covers:
- The packaged default set and its seed file
- Path resolution: argument, then LEDGER_CONFIG_PATH, then default
- Every parse failure surfaces as ConfigurationError naming the file
"""

from decimal import Decimal
from pathlib import Path

import pytest

from ledger_config import CONFIG_PATH_ENV, get_active_config, resolve_config_path
from ledger_config.loader import load_seeds
from ledger_config.schema import DEFAULT_COLLECTION_NAMES, LedgerConfig
from ledger_kernel.domain.policy import BalancePolicy, RateAveraging
from ledger_kernel.domain.snapshot import Collection
from ledger_kernel.exceptions import ConfigurationError

MINIMAL = 'id: test\nversion: "2"\n'


def _write(tmp_path: Path, text: str, name: str = "ledger.yaml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def default_config(monkeypatch) -> LedgerConfig:
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    return get_active_config()


class TestDefaultSet:

    def test_loads(self, default_config):
        config = default_config
        assert config.config_id == "agency-ledger-default"
        assert config.version == "1.0"
        assert config.collection_names == DEFAULT_COLLECTION_NAMES
        assert config.balance_policy == BalancePolicy()
        assert config.rate_averaging is RateAveraging.LAST_OBSERVED
        assert config.transfer_category == "Transfers"
        assert config.low_balance_threshold_usd == Decimal("1000")
        assert config.verify_invariants_on_commit is True

    def test_default_seeds_three_funds(self, default_config):
        config = default_config
        assert config.seed_file is not None and config.seed_file.is_absolute()
        funds = config.seeds[Collection.FUNDS]
        assert [f["name"] for f in funds] == ["Main Account", "Tax Fund", "Savings"]
        assert config.seeds[Collection.CAMPAIGNS] == []

    def test_logged(self, monkeypatch, captured_logs):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        get_active_config()
        (record,) = [r for r in captured_logs() if r["message"] == "ledger_config_loaded"]
        assert record["config_id"] == "agency-ledger-default"


class TestResolveConfigPath:

    def test_argument_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "env.yaml"))
        assert resolve_config_path(tmp_path / "arg.yaml") == tmp_path / "arg.yaml"

    def test_environment_next(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "env.yaml"))
        assert resolve_config_path() == tmp_path / "env.yaml"

    def test_packaged_default_last(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        path = resolve_config_path()
        assert path.name == "default.yaml"
        assert path.parent.name == "sets"


class TestCustomSet:

    def test_minimal_file_uses_defaults(self, tmp_path):
        config = get_active_config(_write(tmp_path, MINIMAL))
        assert config == LedgerConfig(config_id="test", version="2")

    def test_overrides(self, tmp_path):
        text = MINIMAL + (
            "collections:\n"
            "  funds: my_funds\n"
            "balances:\n"
            "  allow_negative:\n"
            "    fund_on_transfer: true\n"
            "    client_ad_balance: false\n"
            "  rate_averaging: weighted\n"
            "transfer_category: Internal\n"
            "rounding:\n"
            "  usd_decimal_places: 4\n"
            "reporting:\n"
            "  low_balance_threshold_usd: 250.5\n"
            "verify_invariants_on_commit: false\n"
        )
        config = get_active_config(_write(tmp_path, text))
        assert config.collection_names[Collection.FUNDS] == "my_funds"
        assert config.collection_names[Collection.CLIENTS] == "ad_clients"
        assert config.balance_policy == BalancePolicy(fund_on_transfer=True, client_ad_balance=False)
        assert config.rate_averaging is RateAveraging.WEIGHTED
        assert config.transfer_category == "Internal"
        assert config.usd_decimal_places == 4
        assert config.low_balance_threshold_usd == Decimal("250.5")
        assert config.verify_invariants_on_commit is False

    def test_relative_seed_file(self, tmp_path):
        _write(
            tmp_path,
            "clients:\n  - id: c-1\n    name: Acme\n    adBalanceUSD: 12.5\n"
            "    joined: 2025-01-02\n",
            "seeds.yaml",
        )
        config = get_active_config(_write(tmp_path, MINIMAL + "seed_file: seeds.yaml\n"))
        (client,) = config.seeds[Collection.CLIENTS]
        assert client["adBalanceUSD"] == "12.5"
        assert client["joined"] == "2025-01-02"

    def test_environment_variable(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(_write(tmp_path, MINIMAL)))
        assert get_active_config().config_id == "test"


class TestInvalidConfig:

    @pytest.mark.parametrize(
        "text, fragment",
        [
            ('version: "1"\n', "missing required key 'id'"),
            ("id: x\n", "missing required key 'version'"),
            (MINIMAL + "collections:\n  wallets: w\n", "unknown collection"),
            (MINIMAL + "collections:\n  funds: ad_clients\n", "distinct"),
            (MINIMAL + "collections:\n  funds: ''\n", "non-empty string"),
            (MINIMAL + "balances:\n  allow_negative:\n    savings: true\n", "unknown balance kind"),
            (MINIMAL + "balances:\n  allow_negative:\n    fund_on_transfer: maybe\n", "true or false"),
            (MINIMAL + "balances:\n  rate_averaging: median\n", "rate_averaging"),
            (MINIMAL + "reporting:\n  low_balance_threshold_usd: lots\n", "must be a number"),
            (MINIMAL + "reporting:\n  low_balance_threshold_usd: -1\n", "non-negative number"),
            (MINIMAL + "rounding:\n  usd_decimal_places: 1.5\n", "non-negative integer"),
            ("- just\n- a list\n", "top level must be a mapping"),
            ("id: [unclosed\n", "invalid YAML"),
        ],
    )
    def test_rejected(self, tmp_path, text, fragment):
        path = _write(tmp_path, text)
        with pytest.raises(ConfigurationError) as exc_info:
            get_active_config(path)
        assert fragment in str(exc_info.value)
        assert exc_info.value.source == str(path)
        assert exc_info.value.code == "CONFIGURATION_ERROR"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="file not found"):
            get_active_config(tmp_path / "absent.yaml")

    def test_missing_seed_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="file not found"):
            get_active_config(_write(tmp_path, MINIMAL + "seed_file: nope.yaml\n"))

    @pytest.mark.parametrize(
        "text, fragment",
        [
            ("wallets: []\n", "unknown seed collection"),
            ("funds: {id: 1}\n", "list of mappings"),
            ("funds:\n  - plain string\n", "list of mappings"),
        ],
    )
    def test_bad_seeds(self, tmp_path, text, fragment):
        with pytest.raises(ConfigurationError, match=fragment):
            load_seeds(_write(tmp_path, text, "seeds.yaml"))
