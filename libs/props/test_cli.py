from props_ops.cli import main


def test_scan(tmp_path, capsys):
    (tmp_path / "a.md").write_text("---\nstatus: open\n---\n", encoding="utf-8")
    assert main(["scan", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "status" in out


def test_apply_template_without_backup(tmp_path):
    template = tmp_path / "Template.md"
    template.write_text("---\nstatus: todo\n---\n", encoding="utf-8")
    target = tmp_path / "a.md"
    target.write_text("Body\n", encoding="utf-8")
    code = main(["--no-backup", "apply-template", str(template), str(target), "--keys", "status"])
    assert code == 0
    assert target.read_text(encoding="utf-8") == "---\nstatus: todo\n---\n\nBody\n"
    assert not (tmp_path / "a.md.bak").exists()


def test_apply_template_reports_failures(tmp_path):
    template = tmp_path / "Template.md"
    template.write_text("---\nstatus: todo\n---\n", encoding="utf-8")
    code = main(["apply-template", str(template), str(tmp_path / "missing.md"), "--keys", "status"])
    assert code == 1


def test_reorder_refused(tmp_path):
    (tmp_path / "a.md").write_text("---\nx: 1\n---\n", encoding="utf-8")
    (tmp_path / "b.md").write_text("---\ny: 1\n---\n", encoding="utf-8")
    assert main(["reorder", str(tmp_path), "--order", "x,y"]) == 1


def test_config_from_env(monkeypatch):
    from props_ops.config import PropsConfig

    monkeypatch.setenv("PROPS_ROOT", "/vault")
    monkeypatch.setenv("PROPS_BACKUP", "no")
    monkeypatch.setenv("PROPS_LOG_LEVEL", "debug")
    monkeypatch.setenv("PROPS_FUZZY_THRESHOLD", "70")
    config = PropsConfig.from_env()
    assert config.root == "/vault"
    assert config.make_backup is False
    assert config.log_level == "DEBUG"
    assert config.fuzzy_threshold == 70.0


def test_apply_template_rejects_empty_keys(tmp_path):
    template = tmp_path / "Template.md"
    template.write_text("---\nstatus: todo\n---\n", encoding="utf-8")
    target = tmp_path / "a.md"
    target.write_text("Body\n", encoding="utf-8")
    assert main(["apply-template", str(template), str(target), "--keys", " , "]) == 2
    assert target.read_text(encoding="utf-8") == "Body\n"


def test_find_template_uses_configured_threshold(tmp_path, monkeypatch, capsys):
    (tmp_path / "Meeting Note.md").write_text("---\n---\n", encoding="utf-8")
    (tmp_path / "Daily.md").write_text("---\n---\n", encoding="utf-8")
    monkeypatch.setenv("PROPS_FUZZY_THRESHOLD", "55")
    assert main(["find-template", "meeting", str(tmp_path)]) == 0
    assert "Meeting Note.md" in capsys.readouterr().out
    # "meeting" scores about 74 against "meeting note"
    monkeypatch.setenv("PROPS_FUZZY_THRESHOLD", "90")
    assert main(["find-template", "meeting", str(tmp_path)]) == 1
