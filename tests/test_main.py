import sys
import os
import io

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import InputNotFoundError, RecordFormatError, StorageError, UnexpectedAmountError, NegativeAmountError, PrecisionError
from main import main, run
from outcome_log import OutcomeLog


def run_csv(tmp_path, lines):
    csv_file = tmp_path / "test.csv"
    csv_file.write_text("\n".join(lines))
    out = io.StringIO()
    run(str(csv_file), out)
    rows = out.getvalue().splitlines()
    assert rows[0] == "client,available,held,total,locked"
    return rows[1:]


class TestRun:
    def test_basic_transactions(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "deposit, 2, 2, 2.0",
            "deposit, 1, 3, 2.0",
            "withdrawal, 1, 4, 1.5",
            "withdrawal, 2, 5, 3.0",
        ])

        assert rows == [
            "1,1.5,0.0,1.5,false",
            "2,2.0,0.0,2.0,false",
        ]

    def test_dispute_resolve(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 1, 1, 100.0",
            "dispute, 1, 1,",
            "resolve, 1, 1,",
        ])

        assert rows == ["1,100.0,0.00,100.00,false"]

    def test_chargeback_then_withdrawal(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 1, 1, 100.0",
            "dispute, 1, 1,",
            "chargeback, 1, 1,",
            "withdrawal, 1, 2, 50.0",
        ])

        assert rows == ["1,100.0,0.00,100.00,true"]

    def test_open_dispute_adds_a_decimal_place(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 1, 1, 100.0",
            "dispute, 1, 1,",
        ])

        assert rows == ["1,100.0,100.00,200.00,false"]

    def test_withdrawal_dispute_scale(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 1, 1, 100.0",
            "withdrawal, 1, 2, 30.5",
            "dispute, 1, 2,",
        ])

        assert rows == ["1,69.5,-30.50,39.00,false"]

    def test_insufficient_funds(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 1, 1, 100.0",
            "withdrawal, 1, 2, 150.0",
        ])

        assert rows == ["1,100.0,0.0,100.0,false"]

    def test_decimal_precision(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 1, 1, 1.2345",
            "deposit, 1, 2, 0.0001",
            "withdrawal, 1, 3, 0.2346",
        ])

        # 1.2345 + 0.0001 - 0.2346 = 1.0000
        assert rows == ["1,1.0000,0.0,1.0000,false"]

    def test_rows_sorted_by_client(self, tmp_path):
        rows = run_csv(tmp_path, [
            "type, client, tx, amount",
            "deposit, 3, 1, 1",
            "deposit, 1, 2, 1",
            "deposit, 2, 3, 1",
        ])

        assert [row.split(",")[0] for row in rows] == ["1", "2", "3"]

    def test_returns_stats(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("\n".join([
            "type, client, tx, amount",
            "deposit, 1, 1, 10",
            "withdrawal, 1, 2, 50",
            "dispute, 1, 2,",
            "dispute, 1, 1,",
        ]))

        stats = run(str(csv_file), io.StringIO())
        assert stats.applied == 2
        assert stats.declined == 1
        assert stats.ignored == 1

    def test_dispute_row_with_amount_rejected(self, tmp_path):
        with pytest.raises(UnexpectedAmountError):
            run_csv(tmp_path, [
                "type, client, tx, amount",
                "deposit, 1, 1, 100.0",
                "dispute, 1, 1, 100.0",
            ])

    def test_negative_amount_rejected(self, tmp_path):
        with pytest.raises(NegativeAmountError):
            run_csv(tmp_path, ["type, client, tx, amount", "deposit, 1, 1, -5"])

    def test_precision_rejected(self, tmp_path):
        with pytest.raises(PrecisionError):
            run_csv(tmp_path, ["type, client, tx, amount", "deposit, 1, 1, 0.00001"])

    def test_no_partial_output_on_error(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,1.0\nbogus,1,2,1.0\n")
        out = io.StringIO()

        with pytest.raises(RecordFormatError):
            run(str(csv_file), out)
        assert out.getvalue() == ""

    def test_failed_release_keeps_original_error(self, tmp_path, monkeypatch):
        def broken_close(self):
            raise StorageError("close failed")

        monkeypatch.setattr(OutcomeLog, "close", broken_close)
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,1.0\nbogus,1,2,1.0\n")

        with pytest.raises(RecordFormatError):
            run(str(csv_file), io.StringIO())

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputNotFoundError):
            run(str(tmp_path / "nope.csv"), io.StringIO())


class TestMain:
    def test_success(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,100.0\n")

        assert main([str(csv_file)]) == 0
        captured = capsys.readouterr()
        assert captured.out == "client,available,held,total,locked\n1,100.0,0.0,100.0,false\n"

    def test_no_arguments(self):
        assert main([]) == 1

    def test_too_many_arguments(self, tmp_path):
        assert main([str(tmp_path / "a.csv"), str(tmp_path / "b.csv")]) == 1

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "nope.csv")]) == 1

    def test_directory_is_unreadable(self, tmp_path):
        assert main([str(tmp_path)]) == 1

    def test_malformed_record(self, tmp_path, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,abc,1,1.0\n")

        assert main([str(csv_file)]) == 1
        assert capsys.readouterr().out == ""

    def test_validation_failure(self, tmp_path):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text("type,client,tx,amount\nwithdrawal,1,1,\n")
        assert main([str(csv_file)]) == 1
