from goalforest.paths import PROJECT_ROOT, get_data_dir, get_logs_dir, get_state_path


def clear_env(monkeypatch):
    for name in ("GOALFOREST_DATA_DIR", "GOALFOREST_LOGS_DIR", "GOALFOREST_STATE_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_live_under_project_root(monkeypatch):
    clear_env(monkeypatch)

    assert get_data_dir() == PROJECT_ROOT / "data"
    assert get_logs_dir() == PROJECT_ROOT / "logs"
    assert get_state_path("state.json") == PROJECT_ROOT / "data" / "state.json"


def test_relocated_data_dir_carries_logs_and_state(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("GOALFOREST_DATA_DIR", str(tmp_path))

    assert get_logs_dir() == tmp_path / "logs"
    assert get_state_path("state.json") == tmp_path / "state.json"


def test_explicit_locations_win(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("GOALFOREST_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("GOALFOREST_LOGS_DIR", str(tmp_path / "var" / "log"))
    monkeypatch.setenv("GOALFOREST_STATE_PATH", str(tmp_path / "mine.json"))

    assert get_logs_dir() == tmp_path / "var" / "log"
    assert get_state_path("state.json", tmp_path / "other") == tmp_path / "mine.json"
