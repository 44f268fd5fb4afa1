"""
Test cases for configuration loading and the command-line tool
"""

import json
import logging

import numpy as np
import pytest

from face_registry.config import DEFAULT_CONFIG, get_default_config, load_config, merge_config
from face_registry.main import load_embedding_file, main


class TestConfig:
    """Test cases for configuration loading."""

    def test_defaults(self):
        config = load_config(None)
        assert config['recognition']['match_threshold'] == 0.6
        assert config['embedding']['embedding_size'] == 128
        assert config['embedding']['input_size'] == [160, 160]

    def test_default_copy_is_independent(self):
        config = get_default_config()
        config['recognition']['match_threshold'] = 0.1
        assert DEFAULT_CONFIG['recognition']['match_threshold'] == 0.6

    def test_yaml_overrides_merge(self, tmp_path):
        config_file = tmp_path / 'config.yaml'
        config_file.write_text("recognition:\n  match_threshold: 0.5\n")

        config = load_config(str(config_file))

        assert config['recognition']['match_threshold'] == 0.5
        assert config['recognition']['unknown_label'] == 'Unknown'
        assert config['storage']['database_file'] == 'data/faces.json'

    @pytest.mark.parametrize("content", ["key: [unclosed", "- just\n- a list\n"])
    def test_broken_file_falls_back(self, tmp_path, content):
        config_file = tmp_path / 'config.yaml'
        config_file.write_text(content)
        assert load_config(str(config_file)) == get_default_config()

    def test_missing_file_falls_back(self, tmp_path):
        assert load_config(str(tmp_path / 'absent.yaml')) == get_default_config()

    def test_merge_config(self):
        merged = merge_config({'a': {'b': 1, 'c': 2}}, {'a': {'c': 3}, 'd': 4})
        assert merged == {'a': {'b': 1, 'c': 3}, 'd': 4}


class TestCommandLine:
    """Test cases for the face-registry command."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        """Drop the stdout handler installed by main() after each test."""
        yield
        root = logging.getLogger()
        for handler in list(root.handlers):
            if type(handler) is logging.StreamHandler:
                root.removeHandler(handler)

    @pytest.fixture
    def database(self, tmp_path):
        return str(tmp_path / 'faces.json')

    @pytest.fixture
    def embedding_file(self, tmp_path):
        path = tmp_path / 'alice.json'
        embedding = np.random.default_rng(5).standard_normal(128)
        path.write_text(json.dumps(embedding.tolist()))
        return str(path)

    def test_enroll_recognize_list(self, database, embedding_file, capsys):
        assert main(['--database', database, 'enroll', '--name', 'Alice',
                     '--embedding', embedding_file]) == 0
        assert 'Face registered successfully: Alice' in capsys.readouterr().out

        assert main(['--database', database, 'recognize', '--embedding', embedding_file]) == 0
        assert 'Recognized: Alice' in capsys.readouterr().out

        assert main(['--database', database, 'list']) == 0
        out = capsys.readouterr().out
        assert 'Enrolled people: 1' in out
        assert '- 1: Alice' in out

    def test_recognize_unknown(self, database, embedding_file, capsys):
        assert main(['--database', database, 'recognize', '--embedding', embedding_file]) == 0
        assert 'Recognized: Unknown' in capsys.readouterr().out

    def test_enroll_npy(self, tmp_path, database, capsys):
        path = tmp_path / 'bob.npy'
        np.save(path, np.ones(128))
        assert main(['--database', database, 'enroll', '-n', 'Bob', '-e', str(path)]) == 0

    def test_enroll_invalid_embedding(self, tmp_path, database, capsys):
        path = tmp_path / 'short.json'
        path.write_text(json.dumps([1.0, 2.0]))
        assert main(['--database', database, 'enroll', '-n', 'Bob', '-e', str(path)]) == 1
        assert 'Enrollment failed' in capsys.readouterr().out

    def test_unreadable_embedding_file(self, tmp_path, database, capsys):
        assert main(['--database', database, 'recognize', '-e', str(tmp_path / 'nope.json')]) == 1

    def test_unopenable_log_file(self, tmp_path, database, embedding_file, capsys):
        """A bad log file path falls back to stdout logging."""
        config_file = tmp_path / 'config.yaml'
        config_file.write_text(
            f"logging:\n  log_file: {tmp_path / 'missing' / 'registry.log'}\n")

        assert main(['--config', str(config_file), '--database', database,
                     'enroll', '-n', 'Alice', '-e', embedding_file]) == 0
        assert 'Cannot open log file' in capsys.readouterr().out

    def test_corrupt_database_recognizes_unknown(self, tmp_path, database, embedding_file, capsys):
        with open(database, 'w') as f:
            f.write('[{"name": "Alice", "embedding": [1' + '0' * 400 + ']}]')

        assert main(['--database', database, 'recognize', '-e', embedding_file]) == 0
        assert 'Recognized: Unknown' in capsys.readouterr().out

    def test_stats(self, database, embedding_file, capsys):
        main(['--database', database, 'enroll', '-n', 'Alice', '-e', embedding_file])
        capsys.readouterr()
        assert main(['--database', database, 'stats']) == 0
        out = capsys.readouterr().out
        assert 'total_identities: 1' in out
        assert 'last_load_status: ok' in out


def test_load_embedding_file_bad_json(tmp_path):
    path = tmp_path / 'bad.json'
    path.write_text("{")
    assert load_embedding_file(str(path)) is None
