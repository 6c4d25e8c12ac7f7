"""
CLI tests using click's CliRunner.
"""

import json

import numpy as np
import pytest
import yaml
from click.testing import CliRunner

from smserve.cli.main import cli
from smserve.core.config import CONFIG_ENV_VAR
from smserve.core.errors import ExitCode


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return CliRunner()


@pytest.fixture
def fake_config(tmp_path, fake_backend_registered):
    path = tmp_path / "smserve.yaml"
    path.write_text(yaml.safe_dump({"version": 1, "backend": "fake"}))
    return path


class TestInspect:

    def test_json(self, runner, multi_model):
        result = runner.invoke(cli, ["inspect", str(multi_model), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [mg["tags"] for mg in data] == [["serve"], ["serve", "gpu"]]
        assert "__saved_model_init_op" not in data[0]["signature_defs"]
        assert data[0]["signature_defs"]["serving_default"]["inputs"]["b"] == {
            "name": "input_b:0",
            "dtype": "int32",
            "tf_dtype": "DT_INT64",
            "shape": [-1],
        }

    def test_table(self, runner, simple_model):
        result = runner.invoke(cli, ["inspect", str(simple_model)])

        assert result.exit_code == 0, result.output
        assert "serving_default" in result.output
        assert "x:0" in result.output

    def test_missing_descriptor_exit_code(self, runner, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(cli, ["inspect", str(empty), "--json"])

        assert result.exit_code == int(ExitCode.DESCRIPTOR_ERROR)
        assert json.loads(result.stdout)["error"]["code"] == "E1001"


class TestRun:

    def test_named_inputs(self, runner, simple_model, fake_config, tmp_path):
        np.save(tmp_path / "x.npy", np.ones((2, 3), dtype=np.float32))
        out_dir = tmp_path / "out"

        result = runner.invoke(cli, [
            "--config", str(fake_config),
            "run", str(simple_model),
            "-i", f"x={tmp_path / 'x.npy'}",
            "--output-dir", str(out_dir),
            "--json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["y"]["shape"] == [2, 3]
        np.testing.assert_array_equal(np.load(out_dir / "y.npy"), np.full((2, 3), 2.0))

    def test_inputs_cast_to_signature_dtype(self, runner, simple_model, fake_config, tmp_path):
        np.save(tmp_path / "x.npy", np.ones((1, 3), dtype=np.float64))

        result = runner.invoke(cli, [
            "--config", str(fake_config),
            "run", str(simple_model),
            "-i", f"x={tmp_path / 'x.npy'}",
            "--json",
        ])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["y"]["dtype"] == "float32"

    def test_input_mismatch(self, runner, simple_model, fake_config, tmp_path):
        np.save(tmp_path / "z.npy", np.ones((1, 3), dtype=np.float32))

        result = runner.invoke(cli, [
            "--config", str(fake_config),
            "run", str(simple_model),
            "-i", f"z={tmp_path / 'z.npy'}",
            "--json",
        ])

        assert result.exit_code == int(ExitCode.INPUT_ERROR)
        assert json.loads(result.stdout)["error"]["code"] == "E3001"

    def test_unknown_tags(self, runner, simple_model, fake_config, tmp_path):
        np.save(tmp_path / "x.npy", np.ones((1, 3), dtype=np.float32))

        result = runner.invoke(cli, [
            "--config", str(fake_config),
            "run", str(simple_model),
            "-i", f"x={tmp_path / 'x.npy'}",
            "--tags", "serve,gpu",
        ])

        assert result.exit_code == int(ExitCode.SIGNATURE_ERROR)

    def test_bad_input_spec(self, runner, simple_model, fake_config):
        result = runner.invoke(cli, [
            "--config", str(fake_config),
            "run", str(simple_model),
            "-i", "no-equals-sign",
        ])

        assert result.exit_code == 2
        assert "KEY=FILE.npy" in result.output


class TestDoctor:

    def test_json_soft(self, runner, fake_config):
        result = runner.invoke(cli, ["--config", str(fake_config), "doctor", "--json", "--soft"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["config"]["backend"] == "fake"
        assert data["config"]["path"] == str(fake_config)
        assert data["backends"]["fake"]["valid"] is True
        assert "numpy" in data["packages"]


class TestConfigOption:

    def test_invalid_config_exit_code(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"version": 7}))

        result = runner.invoke(cli, ["--config", str(path), "inspect", str(tmp_path)])

        assert result.exit_code == int(ExitCode.CONFIG_ERROR)
