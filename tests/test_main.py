import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main


class TestMain:
    def test_usage_error(self, capsys):
        assert main.main(["ledger-replay"]) == main.EXIT_USAGE
        assert "Usage: ledger-replay <input.csv>" in capsys.readouterr().err

    def test_too_many_arguments(self, capsys):
        assert main.main(["ledger-replay", "a.csv", "b.csv"]) == main.EXIT_USAGE
        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert main.main(["ledger-replay", str(tmp_path / "missing.csv")]) == main.EXIT_INPUT_ERROR
        assert capsys.readouterr().out == ""

    def test_writes_balances(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 2, 2, 10.0",
            "deposit, 1, 1, 20.0",
            "dispute, 1, 1,",
            "chargeback, 1, 1,",
            "bad row",
        ]))

        assert main.main(["ledger-replay", str(csv_file)]) == 0

        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "1,0,0,0,true\n"
            "2,10,0,10,false\n"
        )

    def test_honours_worker_setting(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("LEDGER_WORKERS", "4")
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,1.23456\ndeposit,5,2,2\n")

        assert main.main(["ledger-replay", str(csv_file)]) == 0

        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "1,1.2346,0,1.2346,false\n"
            "5,2,0,2,false\n"
        )
