"""CLI 入口测试"""

import sys
from pathlib import Path

import pytest
from canteiro.core import __main__ as cli


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["canteiro.core", *args])
    cli.main()


class TestCli:
    """python -m canteiro.core"""

    def test_usage(self, monkeypatch, capsys):
        """无参数时打印用法并退出"""
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch)
        assert exc_info.value.code == 1
        assert "seed" in capsys.readouterr().out

    def test_unknown_command(self, monkeypatch, capsys, tmp_path: Path):
        """未知命令退出码非 0"""
        monkeypatch.setenv("CANTEIRO_DB_PATH", str(tmp_path / "cli.db"))
        with pytest.raises(SystemExit):
            _run(monkeypatch, "explode")
        assert "未知命令" in capsys.readouterr().out

    def test_seed_then_stats(self, monkeypatch, capsys, tmp_path: Path):
        """写入演示数据后输出汇总"""
        monkeypatch.setenv("CANTEIRO_DB_PATH", str(tmp_path / "cli.db"))
        _run(monkeypatch, "seed")
        _run(monkeypatch, "stats")
        out = capsys.readouterr().out
        assert "共 5 个任务" in out
        assert "总任务数: 5" in out

    def test_summary_and_history(self, monkeypatch, capsys, tmp_path: Path):
        """摘要与审计日志输出到 stdout"""
        monkeypatch.setenv("CANTEIRO_DB_PATH", str(tmp_path / "cli.db"))
        _run(monkeypatch, "seed")
        _run(monkeypatch, "summary", "t2")
        _run(monkeypatch, "history", "t2")
        out = capsys.readouterr().out
        assert "Montagem Sole Plate" in out
        assert "暂无状态变更记录" in out

    def test_summary_save(self, monkeypatch, capsys, tmp_path: Path):
        """--save 将摘要写入当前目录下的 tarefa-<slug>.txt"""
        monkeypatch.setenv("CANTEIRO_DB_PATH", str(tmp_path / "cli.db"))
        monkeypatch.chdir(tmp_path)
        _run(monkeypatch, "seed")
        _run(monkeypatch, "summary", "t1", "--save")

        saved = tmp_path / "tarefa-avalia--o-estrutural-t-rreo.txt"
        assert saved.exists()
        text = saved.read_text(encoding="utf-8")
        assert text.startswith("RESUMO DA TAREFA\n")
        assert "Avaliação Estrutural Térreo" in text
        assert "摘要已写入" in capsys.readouterr().out

    def test_missing_task(self, monkeypatch, capsys, tmp_path: Path):
        """任务不存在时退出码非 0"""
        monkeypatch.setenv("CANTEIRO_DB_PATH", str(tmp_path / "cli.db"))
        with pytest.raises(SystemExit):
            _run(monkeypatch, "history", "nope")
        assert "任务不存在" in capsys.readouterr().out
