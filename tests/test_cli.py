from __future__ import annotations

import json

from shengji.cli import main


class TestCli:
    def test_runs_operation(self, tmp_path, capsys):
        path = tmp_path / "request.json"
        path.write_text(json.dumps([{}, {}]), encoding="utf-8")
        assert main(["compute_deck_len", "--request", str(path)]) == 0
        assert capsys.readouterr().out.strip() == "108"

    def test_bad_request(self, tmp_path, capsys):
        path = tmp_path / "request.json"
        path.write_text(json.dumps({"trump": None, "cards": ["ZZ"]}), encoding="utf-8")
        assert main(["find_viable_plays", "--request", str(path)]) == 1
        assert "ZZ" in capsys.readouterr().err

    def test_unreadable_request(self, tmp_path, capsys):
        assert main(["compute_deck_len", "--request", str(tmp_path / "missing.json")]) == 1
        assert "Cannot read request" in capsys.readouterr().err

    def test_indent(self, tmp_path, capsys):
        path = tmp_path / "request.json"
        path.write_text(json.dumps({"trump": {"suit": "S", "number": 2}, "cards": ["3S"]}), encoding="utf-8")
        assert main(["sort_and_group_cards", "--request", str(path), "--indent", "2"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out == {"results": [{"suit": "TRUMP", "cards": ["3S"]}]}
