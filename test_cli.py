"""
Tests for the rho-race command line.

Covers:
1. Output: exactly one factor (or "none") on stdout
2. Exit codes: 0 on success, 1 on any input error
3. Options: seed, iteration cap, prime check, verbose logging
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from rho_cli import main, build_parser, NO_FACTOR


class TestOutput:
    """Successful runs print one line."""

    def test_8051_four_workers(self, capsys):
        assert main(["8051", "4"]) == 0
        out, err = capsys.readouterr()
        assert out.endswith("\n")
        assert out.count("\n") == 1
        assert int(out) in (83, 97)

    def test_fifteen_default_workers(self, capsys):
        assert main(["15"]) == 0
        out, _ = capsys.readouterr()
        assert int(out) in (3, 5)

    def test_prime_prints_none(self, capsys):
        assert main(["97", "1", "--max-iterations", "10000"]) == 0
        out, _ = capsys.readouterr()
        assert out == f"{NO_FACTOR}\n"

    def test_check_prime(self, capsys):
        assert main(["2147483647", "2", "--check-prime"]) == 0
        out, _ = capsys.readouterr()
        assert out.strip() == NO_FACTOR

    def test_big_number(self, capsys):
        n = 1000003 * 1000033
        assert main([str(n), "2", "--seed", "7", "--check-interval", "100"]) == 0
        out, _ = capsys.readouterr()
        if out.strip() != NO_FACTOR:
            assert int(out) in (1000003, 1000033)

    def test_verbose_logging(self, capsys, caplog):
        caplog.set_level(logging.DEBUG, logger="rho_race")
        assert main(["8051", "2", "-v"]) == 0
        out, _ = capsys.readouterr()
        assert "racing 2 worker(s)" in caplog.text
        assert out.count("\n") == 1


class TestErrors:
    """Input errors exit 1 and print nothing on stdout."""

    @pytest.mark.parametrize("workers", ["0", "-2", "two", "1.5", "", "+-2", "²", "٣"])
    def test_bad_worker_count(self, capsys, workers):
        assert main(["8051", workers]) == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "error" in err

    @pytest.mark.parametrize("number", ["abc", "12x", "", "0x1f", "1e5", "+-5", "²", "٣٥", "1_000"])
    def test_bad_number(self, capsys, number):
        assert main([number]) == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "not a valid base 10 number" in err

    @pytest.mark.parametrize("number", ["1", "0", "-15"])
    def test_number_without_factors(self, capsys, number):
        assert main([number]) == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "error" in err

    def test_negative_iteration_cap(self, capsys):
        assert main(["8051", "1", "--max-iterations", "-1"]) == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "--max-iterations" in err

    def test_worker_startup_failure(self, capsys, monkeypatch):
        real_submit = ThreadPoolExecutor.submit
        calls = []

        def flaky_submit(executor, fn, *args, **kwargs):
            calls.append(fn)
            if len(calls) > 1:
                raise RuntimeError("can't start new thread")
            return real_submit(executor, fn, *args, **kwargs)

        monkeypatch.setattr(ThreadPoolExecutor, "submit", flaky_submit)
        assert main(["8051", "3"]) == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "couldn't start worker" in err

    def test_bad_check_interval(self, capsys):
        assert main(["8051", "1", "--check-interval", "0"]) == 1
        assert capsys.readouterr().out == ""

    def test_missing_number(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1
        assert capsys.readouterr().out == ""

    def test_too_many_arguments(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["8051", "2", "3"])
        assert exc.value.code == 1


def test_parser_defaults():
    args = build_parser().parse_args(["8051"])
    assert args.workers == "1"
    assert args.check_interval == 1_000_000
    assert args.max_iterations is None
    assert args.seed is None
    assert not args.check_prime
