"""Tests for the command-line interface."""

import json

from scipy.io import wavfile
from typer.testing import CliRunner

from chord_listener.cli import app
from chord_listener.inference import LinearChordModel

from conftest import SAMPLE_RATE, generate_chord, parse_notes

runner = CliRunner()


class TestChordsCommand:
    """Tests for `chord-listener chords`."""

    def test_table_output(self):
        result = runner.invoke(app, ["chords", "C4", "E4", "G4"])

        assert result.exit_code == 0
        assert "Chord: C" in result.stdout

    def test_json_output(self):
        result = runner.invoke(app, ["chords", "A3", "C4", "E4", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [n["name"] for n in payload["notes"]] == ["A3", "C4", "E4"]
        assert payload["source"] == "rules"
        assert payload["chords"][0]["symbol"] == "Am"

    def test_notes_sorted(self):
        result = runner.invoke(app, ["chords", "G4", "C4", "E4", "--json"])
        payload = json.loads(result.stdout)
        assert [n["name"] for n in payload["notes"]] == ["C4", "E4", "G4"]

    def test_top_limits_candidates(self):
        result = runner.invoke(app, ["chords", "C4", "E4", "G4", "A4", "--json", "--top", "2"])
        payload = json.loads(result.stdout)
        assert [c["symbol"] for c in payload["chords"]] == ["C6", "Am7"]

    def test_template_model(self):
        result = runner.invoke(app, ["chords", "C4", "--model", "templates", "--json"])

        payload = json.loads(result.stdout)
        assert payload["source"] == "model"
        assert payload["chords"][0]["symbol"] == "C5"

    def test_saved_model_with_ensemble(self, tmp_path):
        path = tmp_path / "model.npz"
        LinearChordModel.from_templates().save(path)

        result = runner.invoke(
            app, ["chords", "C4", "E4", "G4", "--model", str(path), "--ensemble", "--json"]
        )
        payload = json.loads(result.stdout)
        assert payload["source"] == "ensemble"
        assert payload["chords"][0]["symbol"] == "C"

    def test_invalid_note(self):
        result = runner.invoke(app, ["chords", "C4", "H2"])
        assert result.exit_code == 1
        assert "Invalid" in result.stdout

    def test_no_chord(self):
        result = runner.invoke(app, ["chords", "C4"])
        assert result.exit_code == 0
        assert "No chord matched" in result.stdout


class TestAnalyzeCommand:
    """Tests for `chord-listener analyze`."""

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.wav")])

        assert result.exit_code == 1
        assert "File not found" in result.stdout

    def test_wav_file(self, tmp_path):
        path = tmp_path / "g_major.wav"
        wavfile.write(path, SAMPLE_RATE, generate_chord(parse_notes("G3", "B3", "D4"), 1.0))

        result = runner.invoke(app, ["analyze", str(path), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert [n["name"] for n in payload["notes"]] == ["G3", "B3", "D4"]
        assert payload["chords"][0]["symbol"] == "G"

    def test_silent_file(self, tmp_path):
        path = tmp_path / "silence.wav"
        wavfile.write(path, SAMPLE_RATE, generate_chord([], 0.5))

        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestListenCommand:
    """Tests for `chord-listener listen`."""

    def test_rejects_short_window(self):
        result = runner.invoke(app, ["listen", "0.1"])

        assert result.exit_code == 1
        assert "at least 0.2 seconds" in result.stdout
