"""Tests for the installation check script."""

from .verify_setup import check_dependencies, check_solver, main


class TestVerifySetup:
    """Tests for the dependency and solver checks."""

    def test_dependencies_import(self, capsys):
        assert check_dependencies()
        assert "MISSING" not in capsys.readouterr().out

    def test_solver_picks_best_arm(self, capsys):
        assert check_solver()
        assert "Arm_3" in capsys.readouterr().out

    def test_main_succeeds(self, capsys):
        assert main() == 0
        assert "Environment is ready" in capsys.readouterr().out
