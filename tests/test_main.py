"""Tests for the command line entry point."""

import json

import pytest

import main
from core.insights import NEEDS_PRACTICE_MESSAGE
from core.text_normalizer import fallback_words


@pytest.fixture(autouse=True)
def isolated_dirs(monkeypatch, tmp_path):
    """Keep logs and settings out of the real home directory."""
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


class TestTextCommand:
    """Tests for the text subcommand."""

    def test_offline_prints_fallback(self, capsys):
        assert main.main(["--offline", "text"]) == 0

        out = capsys.readouterr().out.strip()
        assert out == " ".join(fallback_words())

    def test_offline_after_subcommand(self, capsys):
        assert main.main(["text", "--offline", "--weak-keys", "q"]) == 0

        out = capsys.readouterr().out.strip()
        assert out == " ".join(fallback_words())

    def test_word_count_from_config(self, capsys, tmp_path):
        settings = tmp_path / "settings.json"
        settings.write_text(json.dumps({"target_word_count": 20}))

        main.main(["--offline", "--config", str(settings), "text"])

        assert len(capsys.readouterr().out.split()) == 20


class TestScoreCommand:
    """Tests for the score subcommand."""

    def test_scores_keystroke_log(self, capsys, tmp_path):
        log_file = tmp_path / "session.json"
        log_file.write_text(
            json.dumps(
                {
                    "keystrokes": [
                        {
                            "character": "h",
                            "expected_character": "h",
                            "timestamp_ms": 0,
                            "is_correct": True,
                        },
                        {
                            "character": "x",
                            "expected_character": "i",
                            "timestamp_ms": 150,
                            "is_correct": False,
                        },
                    ],
                    "elapsed_seconds": 60,
                    "completed_words": 0,
                    "total_words": 1,
                }
            )
        )

        assert main.main(["--offline", "score", str(log_file)]) == 0

        result = json.loads(capsys.readouterr().out)
        assert result["total_keystrokes"] == 2
        assert result["correct_keystrokes"] == 1
        assert result["accuracy_percent"] == 50
        assert result["struggling_keys"][0]["key"] == "i"
        assert result["struggling_keys"][0]["average_delay_ms"] == 150
        assert result["insight"] == NEEDS_PRACTICE_MESSAGE

    def test_offline_after_subcommand(self, capsys, tmp_path):
        log_file = tmp_path / "session.json"
        log_file.write_text(json.dumps({"keystrokes": [], "total_words": 1}))

        assert main.main(["score", str(log_file), "--offline"]) == 0
        assert json.loads(capsys.readouterr().out)["total_keystrokes"] == 0

    @pytest.mark.parametrize(
        "payload",
        [
            {"keystrokes": [{"character": "a"}]},
            {"keystrokes": ["a"]},
            {"keystrokes": [], "elapsed_seconds": "soon"},
            [1, 2, 3],
        ],
    )
    def test_invalid_keystroke_log(self, capsys, tmp_path, payload):
        log_file = tmp_path / "session.json"
        log_file.write_text(json.dumps(payload))

        assert main.main(["--offline", "score", str(log_file)]) == 1
        assert "invalid keystroke log" in capsys.readouterr().err

    def test_missing_file(self, capsys, tmp_path):
        assert main.main(["--offline", "score", str(tmp_path / "nope.json")]) == 1
        assert "cannot read session file" in capsys.readouterr().err


class TestHelpers:
    """Tests for CLI helper functions."""

    def test_profile_from_weak_keys(self):
        profile = main.profile_from_weak_keys([" Q", "z", ""], 80)
        assert profile.weak_keys == ["q", "z"]
        assert profile.accuracy_percent == 80

    def test_profile_from_no_keys(self):
        assert main.profile_from_weak_keys([], 80) is None

    def test_requires_subcommand(self):
        with pytest.raises(SystemExit):
            main.main([])
