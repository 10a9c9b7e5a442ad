"""
Test cases for the CLI module (cli.py)
"""

import json
import os
import tempfile
from unittest.mock import patch, MagicMock

import pytest
import numpy as np

from cli import load_data, build_report, train_command, main
from sofm import SOM, ConnectionType


@pytest.fixture
def sample_csv_file():
    """Create a temporary CSV file for testing"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
        f.write("a,b,label\n0.0,0.0,x\n0.0,1.0,x\n10.0,10.0,y\n10.0,11.0,y\n")
        return f.name


@pytest.fixture
def sample_json_file():
    """Create a temporary JSON file for testing"""
    data = [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0]]
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(data, f)
        return f.name


@pytest.fixture
def sample_npy_file():
    """Create a temporary NPY file for testing"""
    data = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0]])
    with tempfile.NamedTemporaryFile(suffix=".npy", delete=False) as f:
        np.save(f.name, data)
        return f.name


@pytest.fixture
def sample_npz_file():
    """Create a temporary NPZ file for testing"""
    data = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0]])
    with tempfile.NamedTemporaryFile(suffix=".npz", delete=False) as f:
        np.savez(f.name, data=data)
        return f.name


@pytest.fixture
def output_file():
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False) as f:
        path = f.name
    yield path
    if os.path.exists(path):
        os.unlink(path)


@pytest.mark.cli
@pytest.mark.io
class TestLoadData:
    """Tests for load_data function"""

    def test_load_csv_keeps_numeric_columns(self, sample_csv_file):
        data = load_data(sample_csv_file)
        assert data.shape == (4, 2)
        assert data.dtype == np.float64

    def test_load_json_file(self, sample_json_file):
        data = load_data(sample_json_file, "json")
        assert data.shape == (3, 3)

    def test_load_npy_file(self, sample_npy_file):
        data = load_data(sample_npy_file)
        assert data.shape == (3, 3)

    def test_load_npz_file(self, sample_npz_file):
        data = load_data(sample_npz_file)
        assert data.shape == (3, 3)

    def test_load_nonexistent_file(self):
        with pytest.raises(FileNotFoundError):
            load_data("nonexistent.csv")

    def test_load_unsupported_format(self, sample_csv_file):
        with pytest.raises(ValueError, match="Unsupported format"):
            load_data(sample_csv_file, "txt")

    def test_load_invalid_json(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write("{invalid json}")
        with pytest.raises(ValueError):
            load_data(f.name)


@pytest.mark.cli
@pytest.mark.unit
class TestBuildReport:
    """Tests for build_report function"""

    def test_report_is_json_serializable(self):
        data = np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]])
        som = SOM(data, 1, 2, 5, ConnectionType.GRID_FOUR)
        epochs_run = som.train()

        report = build_report(som, epochs_run)

        assert report["epochs_run"] == 5
        assert report["shape"] == [1, 2]
        assert report["neighbors"] == [[1], [0]]
        assert sum(report["awards"]) == 4
        json.dumps(report)


@pytest.mark.cli
@pytest.mark.unit
class TestTrainCommand:
    """Tests for train_command function"""

    @pytest.fixture
    def train_args(self, sample_csv_file, output_file):
        """Create mock args for training"""
        args = MagicMock()
        args.input = sample_csv_file
        args.format = "auto"
        args.rows = 1
        args.cols = 2
        args.epochs = 20
        args.conn_type = "grid_four"
        args.init_type = "uniform_grid"
        args.radius = 1.0
        args.learning_rate = 0.1
        args.threshold = 0.001
        args.autostop = True
        args.seed = 42
        args.verbose = False
        args.output = output_file
        args.visualize = False
        return args

    def test_train_command_writes_report(self, train_args):
        with patch("builtins.print"):
            train_command(train_args)

        with open(train_args.output) as f:
            report = json.load(f)

        assert {0, 1} <= set(report["capture_objects"][0])
        assert {2, 3} <= set(report["capture_objects"][1])

    def test_train_command_invalid_grid(self, train_args):
        train_args.rows = 0

        with patch("builtins.print") as mock_print:
            with pytest.raises(SystemExit) as exc_info:
                train_command(train_args)

        assert exc_info.value.code == 1
        mock_print.assert_called()

    def test_train_command_load_error(self, train_args):
        with patch("cli.load_data", side_effect=ValueError("bad data")):
            with patch("builtins.print"):
                with pytest.raises(SystemExit):
                    train_command(train_args)


@pytest.mark.cli
class TestMain:
    """Tests for main entry point"""

    def test_main_no_args(self):
        with patch("sys.argv", ["cli.py"]):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1

    def test_main_version(self, capsys):
        with patch("sys.argv", ["cli.py", "version"]):
            main()
        assert "SOFM CLI v" in capsys.readouterr().out

    def test_main_train_command(self, sample_csv_file, output_file):
        args = [
            "cli.py",
            "train",
            sample_csv_file,
            "--rows",
            "2",
            "--cols",
            "2",
            "--epochs",
            "5",
            "--conn-type",
            "honeycomb",
            "--output",
            output_file,
        ]
        with patch("sys.argv", args):
            with patch("builtins.print"):
                main()

        with open(output_file) as f:
            report = json.load(f)
        assert report["conn_type"] == "honeycomb"
        assert report["epochs_run"] == 5
