import os


def test_retention_prunes_old_logs(tmp_path):
    from djemini.logger.retention import enforce_retention

    for i in range(5):
        p = tmp_path / f"{i}.log"
        p.write_text("x")
        os.utime(p, (1000 + i, 1000 + i))

    removed = enforce_retention(tmp_path, keep=2)

    remaining = sorted(p.name for p in tmp_path.glob("*.log"))
    assert remaining == ["3.log", "4.log"]
    assert len(removed) == 3


def test_retention_zero_keeps_everything(tmp_path):
    from djemini.logger.retention import enforce_retention

    for i in range(3):
        (tmp_path / f"{i}.log").write_text("x")

    assert enforce_retention(tmp_path, keep=0) == []
    assert len(list(tmp_path.glob("*.log"))) == 3


def test_retention_ignores_other_files(tmp_path):
    from djemini.logger.retention import enforce_retention

    (tmp_path / "notes.txt").write_text("x")
    (tmp_path / "a.log").write_text("x")

    enforce_retention(tmp_path, keep=1)
    assert (tmp_path / "notes.txt").exists()
