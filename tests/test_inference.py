"""Tests for prompt construction, reply parsing and the inference client."""

import json
from datetime import datetime

import httpx
import pytest
from moodtagger.config import AppConfig
from moodtagger.core.errors import InferenceError
from moodtagger.core.features import default_feature_vector
from moodtagger.core.mood import MOOD_DIMENSIONS, MoodAnalysis, get_dimension
from moodtagger.inference import OllamaClient, build_prompt, parse_response

FULL_REPLY = """Here is my analysis:

Mood Valence: 3 - Uplifting chords with a bright lead
Energy: 8 - Driving kick and rolling bassline
Groove Tightness: 4 - Very quantized
Funk/Swing: 2 - Mostly straight
Tempo: 126 - Classic house tempo
Dancefloor Use: 4 - Built for the peak
Layering Potential: 7 - Sparse arrangement
Tension: -1 - Relaxed overall
Rhythmic Complexity: 3 - Four on the floor
Sound Palette: 4 - Synthetic textures
"""


@pytest.fixture
def vector():
    return default_feature_vector(
        "/music/Artist - Track.mp3",
        {"Title": "Track", "Genre": "House"},
    )


class TestPrompt:
    """Test prompt construction."""

    def test_features_in_fixed_order(self, vector):
        prompt = build_prompt(vector)
        labels = [
            "BPM", "Spectral Centroid", "Spectral Flux", "Rhythm Strength",
            "Bass Presence", "Mid Presence", "High Presence", "RMS Energy",
            "Zero Crossing Rate", "Rhythm Regularity",
        ]
        positions = [prompt.index(f"- {label}: ") for label in labels]
        assert positions == sorted(positions)

    def test_two_decimal_formatting(self, vector):
        prompt = build_prompt(vector)
        assert "- BPM: 128.00" in prompt
        assert "- Spectral Centroid: 1000.00" in prompt
        assert "- Zero Crossing Rate: 0.10" in prompt

    def test_every_dimension_requested(self, vector):
        prompt = build_prompt(vector)
        for dimension in MOOD_DIMENSIONS:
            assert f"{dimension.name}:" in prompt
        assert "Tempo: [BPM] - [explanation]" in prompt
        assert "Mood Valence (-5 to +5)" in prompt

    def test_track_name_and_metadata(self, vector):
        prompt = build_prompt(vector)
        assert "The track is: Artist - Track.mp3" in prompt
        assert "Additional track metadata:" in prompt
        assert "- Genre: House" in prompt

    def test_metadata_section_omitted_when_empty(self):
        assert "Additional track metadata" not in build_prompt(default_feature_vector("a.mp3"))


class TestParseResponse:
    """Test parsing of free-text ratings."""

    def test_full_reply(self):
        analysis = parse_response(FULL_REPLY, file_path="a.mp3", model="llama3")

        assert analysis.mood_valence == 3.0
        assert analysis.energy == 8.0
        assert analysis.funk_swing == 2.0
        assert analysis.tempo == 126.0
        assert analysis.tension == -1.0
        assert analysis.sound_palette == 4.0
        assert analysis.model_used == "llama3"
        assert analysis.explanations["Energy"] == "Driving kick and rolling bassline"
        assert analysis.explanations["Funk/Swing"] == "Mostly straight"
        assert analysis.validate_ranges()

    def test_missing_lines_default_to_zero(self):
        analysis = parse_response("Energy: 6 - fine", detected_bpm=122.0)
        assert analysis.energy == 6.0
        assert analysis.mood_valence == 0.0
        assert analysis.rhythmic_complexity == 0.0
        assert analysis.tempo == 122.0
        assert list(analysis.explanations) == ["Energy"]

    def test_malformed_rating_defaults_to_zero(self):
        analysis = parse_response("Energy: high - loud\nTension: 2 - a bit")
        assert analysis.energy == 0.0
        assert analysis.tension == 2.0

    def test_tempo_falls_back_to_fixed_value(self):
        assert parse_response("nothing useful").tempo == 120.0
        assert parse_response("Tempo: 0 - unsure", detected_bpm=0.0).tempo == 120.0

    def test_markdown_and_brackets(self):
        reply = (
            "1. **Energy**: 7 - punchy\n"
            "- **Mood Valence:** +2 - warm\n"
            "Tension: [-3] - calm\n"
            "* Dancefloor Use: 5/5 - peak time\n"
        )
        analysis = parse_response(reply)
        assert analysis.energy == 7.0
        assert analysis.mood_valence == 2.0
        assert analysis.tension == -3.0
        assert analysis.dancefloor_use == 5.0
        assert analysis.explanations["Dancefloor Use"] == "peak time"

    def test_case_insensitive_labels(self):
        assert parse_response("ENERGY: 9 - huge").energy == 9.0

    def test_decimal_ratings(self):
        assert parse_response("Groove Tightness: 2.5 - tight").groove_tightness == 2.5

    def test_timestamp_passed_through(self):
        when = datetime(2024, 5, 1, 12, 0)
        assert parse_response(FULL_REPLY, timestamp=when).analysis_timestamp == when


class TestMoodAnalysis:
    """Test the analysis record."""

    def test_out_of_range_values(self):
        assert not MoodAnalysis(tempo=120.0, energy=11.0, dancefloor_use=3).validate_ranges()
        assert not MoodAnalysis(tempo=0.0, energy=5.0, dancefloor_use=3).validate_ranges()

    def test_summary(self):
        analysis = parse_response(FULL_REPLY, file_path="/music/song.mp3", model="llama3")
        summary = analysis.summary()
        assert summary.splitlines()[0] == "Mood Analysis for song.mp3:"
        assert "  Tempo: 126.0 BPM" in summary
        assert "Analyzed with: llama3" in summary

    def test_dimension_lookup(self):
        assert get_dimension("FunkSwing").name == "Funk/Swing"
        assert get_dimension("dancefloor_use").tag_key == "DancefloorUse"
        assert get_dimension("Unknown") is None


def _client(handler, **overrides) -> OllamaClient:
    config = AppConfig(**overrides)
    return OllamaClient(config, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestOllamaClient:
    """Test the HTTP client against a mock transport."""

    def test_successful_request(self, vector):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"response": FULL_REPLY, "done": True})

        client = _client(handler, ollama_model="mistral", temperature=0.2, max_tokens=500)
        analysis = client.analyze_mood(vector)

        assert analysis.energy == 8.0
        assert analysis.model_used == "mistral"
        assert analysis.file_path == vector.file_path

        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://localhost:11434/api/generate"
        body = json.loads(request.content)
        assert body["model"] == "mistral"
        assert body["stream"] is False
        assert body["options"] == {"temperature": 0.2, "num_predict": 500}
        assert "The track is: Artist - Track.mp3" in body["prompt"]

    def test_base_url_trailing_slash(self):
        client = OllamaClient(AppConfig(ollama_base_url="http://box:11434/api/"))
        assert client.generate_url == "http://box:11434/api/generate"
        client.close()

    def test_tempo_falls_back_to_vector_bpm(self, vector):
        client = _client(lambda request: httpx.Response(200, json={"response": "Energy: 5 - ok"}))
        assert client.analyze_mood(vector).tempo == 128.0

    def test_server_error(self, vector):
        client = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(InferenceError, match="500"):
            client.analyze_mood(vector)

    def test_missing_response_field(self, vector):
        client = _client(lambda request: httpx.Response(200, json={"error": "model not found"}))
        with pytest.raises(InferenceError):
            client.analyze_mood(vector)

    def test_invalid_json(self, vector):
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(InferenceError):
            client.generate("hello")

    def test_connection_error(self, vector):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(InferenceError, match="failed"):
            client.analyze_mood(vector)
