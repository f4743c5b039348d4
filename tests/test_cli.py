import yaml

from combat_logger.cli import main


def test_init_writes_default_config(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    assert main(["--config", str(path), "init"]) == 0
    assert capsys.readouterr().out.strip() == str(path)
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["combatTime"] == 30


def test_init_refuses_to_overwrite(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("combatTime: 9\n", encoding="utf-8")
    assert main(["--config", str(path), "init"]) == 1
    assert main(["--config", str(path), "init", "--force"]) == 0
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["combatTime"] == 30


def test_check_prints_effective_settings(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    path.write_text("combatTime: 9\n", encoding="utf-8")
    assert main(["--config", str(path), "check"]) == 0
    out = yaml.safe_load(capsys.readouterr().out)
    assert out["combatTime"] == 9
    assert out["deathCommand"] == "function death"


def test_check_missing_file_fails(tmp_path):
    assert main(["--config", str(tmp_path / "absent.yaml"), "check"]) == 2
    assert not (tmp_path / "absent.yaml").exists()


def test_strict_check_fails_on_fallbacks(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("combatTime: -1\n", encoding="utf-8")
    assert main(["--config", str(path), "check"]) == 0
    assert main(["--config", str(path), "check", "--strict"]) == 2
