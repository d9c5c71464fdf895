"""Tests for the command-line interface."""

import pytest
from openpyxl import load_workbook

from mxexport import __version__
from mxexport.cli import main


@pytest.fixture
def no_network(monkeypatch):
    """Fail the test on any model server request."""

    def refuse(request, timeout=None):
        raise AssertionError(f"Unexpected request to {request.full_url}")

    monkeypatch.setattr("mxexport.repository.urlopen", refuse)


class TestMain:
    """End-to-end tests for main()."""

    def test_missing_token_file(self, temp_config_dir, monkeypatch, capsys, no_network):
        """Test a missing token aborts before any application is processed."""
        (temp_config_dir / "config" / "token.txt").unlink()
        monkeypatch.chdir(temp_config_dir)

        assert main([]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Token file not found" in captured.err
        assert "Targeting App" not in captured.err
        assert "Applications exported" not in captured.err

    def test_empty_token_file(self, temp_config_dir, monkeypatch, capsys, no_network):
        """Test an empty token aborts with guidance."""
        (temp_config_dir / "config" / "token.txt").write_text("  \n")
        monkeypatch.chdir(temp_config_dir)

        assert main([]) == 1
        assert "is empty" in capsys.readouterr().err

    def test_local_source_success(self, temp_config_dir, model_exports_dir, monkeypatch, capsys, no_network):
        """Test all apps succeed from local exports."""
        monkeypatch.chdir(temp_config_dir)

        assert main(["--source", str(model_exports_dir), "--json"]) == 0

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Applications exported: 2" in captured.err
        assert "Failed applications" not in captured.err

        output = temp_config_dir / "results" / "export.xlsx"
        workbook = load_workbook(output)
        assert workbook.sheetnames == ["Alpha", "Beta"]
        assert [c.value for c in workbook["Beta"][2]] == ["Auth", "Session", "token", "HashedString"]
        assert (temp_config_dir / "results" / "export.json").exists()

    def test_local_source_partial_failure(self, temp_config_dir, model_exports_dir, monkeypatch, capsys):
        """Test a missing export fails its app but still writes the workbook."""
        (model_exports_dir / "beta-id.json").unlink()
        monkeypatch.chdir(temp_config_dir)

        assert main(["--source", str(model_exports_dir)]) == 1

        err = capsys.readouterr().err
        assert "Failed applications: Beta" in err
        assert load_workbook(temp_config_dir / "results" / "export.xlsx").sheetnames == ["Alpha"]

    def test_overrides(self, temp_config_dir, model_exports_dir, tmp_path, monkeypatch):
        """Test results dir, output name and app selection overrides."""
        monkeypatch.chdir(temp_config_dir)
        out_dir = tmp_path / "out"

        code = main(
            [
                "--source", str(model_exports_dir),
                "--results-dir", str(out_dir),
                "--output-name", "review.xlsx",
                "--app", "Beta",
            ]
        )

        assert code == 0
        assert load_workbook(out_dir / "review.xlsx").sheetnames == ["Beta"]

    def test_explicit_config_missing(self, tmp_path, capsys):
        """Test a missing --config file."""
        assert main(["--config", str(tmp_path / "nope.yaml")]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_unexpected_error(self, temp_config_dir, monkeypatch, capsys):
        """Test unexpected errors are reported and exit non-zero."""
        monkeypatch.chdir(temp_config_dir)

        def boom(*args, **kwargs):
            raise KeyError("boom")

        monkeypatch.setattr("mxexport.cli.run_export", boom)

        assert main([]) == 1
        assert "A critical unhandled error occurred" in capsys.readouterr().err

    def test_version(self, capsys):
        """Test --version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
