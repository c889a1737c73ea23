"""Tests for onset detection and rhythm descriptors."""

import pytest
import numpy as np
from moodtagger.analysis import OnsetDetector, RhythmAnalyzer
from moodtagger.analysis.rhythm import autocorrelation, local_maxima

from generate_test_audio import impulse_train


class TestOnsetDetector:
    """Test the energy-difference onset function."""

    @pytest.mark.parametrize(
        "n_samples,expected",
        [(0, 0), (500, 1), (1024, 1), (1536, 2), (44100, 85)],
    )
    def test_frame_count(self, n_samples, expected):
        assert OnsetDetector().frame_count(n_samples) == expected

    def test_invalid_sizes_rejected(self):
        with pytest.raises(ValueError):
            OnsetDetector(window_size=0)
        with pytest.raises(ValueError):
            OnsetDetector(hop_length=-1)

    def test_step_produces_onsets_where_energy_rises(self):
        """Silence then a constant level: energy rises across frames 7 and 8."""
        samples = np.concatenate([np.zeros(4096), np.ones(4096)])
        onset = OnsetDetector().onset_function(samples)

        assert len(onset) == 15
        assert onset[7] == pytest.approx(512.0)
        assert onset[8] == pytest.approx(512.0)
        assert np.count_nonzero(onset) == 2

    def test_first_frame_is_zero_and_values_non_negative(self):
        rng = np.random.default_rng(42)
        onset = OnsetDetector().onset_function(rng.uniform(-1, 1, 20000))
        assert onset[0] == 0.0
        assert (onset >= 0).all()

    def test_silence_has_no_onsets(self):
        onset = OnsetDetector().onset_function(np.zeros(44100))
        assert len(onset) == 85
        assert not onset.any()

    def test_falling_energy_is_not_an_onset(self):
        samples = np.concatenate([np.ones(4096), np.zeros(4096)])
        onset = OnsetDetector().onset_function(samples)
        assert not onset.any()

    def test_short_buffer_single_partial_frame(self):
        onset = OnsetDetector().onset_function(np.ones(100))
        np.testing.assert_array_equal(onset, [0.0])

    def test_strengths_generator_is_single_pass(self):
        detector = OnsetDetector()
        strengths = detector.strengths(np.ones(4096))
        assert len(list(strengths)) == detector.frame_count(4096)
        assert list(strengths) == []


class TestAutocorrelationHelpers:
    """Test autocorrelation and peak picking."""

    def test_autocorrelation_lags(self):
        ac = autocorrelation(np.array([1.0, 0.0, 1.0, 0.0]), 3)
        np.testing.assert_array_equal(ac, [2.0, 0.0, 1.0])

    def test_local_maxima_are_strict(self):
        values = np.array([0.0, 2.0, 1.0, 1.0, 1.0, 3.0, 0.0])
        np.testing.assert_array_equal(local_maxima(values), [1, 5])

    def test_local_maxima_of_short_input(self):
        assert len(local_maxima(np.array([1.0, 2.0]))) == 0


class TestRhythmAnalyzer:
    """Test rhythm strength, regularity and onset density."""

    def test_strength_is_population_variance(self):
        assert RhythmAnalyzer().strength(np.array([0.0, 1.0, 0.0, 1.0])) == pytest.approx(0.25)

    def test_periodic_impulses_are_regular(self):
        """Period 10 over 300 frames: peaks at lags 10..90 average 25/30."""
        regularity = RhythmAnalyzer().regularity(impulse_train(10, 300))
        assert regularity == pytest.approx(25 / 30)

    def test_flat_onset_has_no_regularity(self):
        analyzer = RhythmAnalyzer()
        assert analyzer.regularity(np.zeros(300)) == 0.0
        assert analyzer.regularity(np.array([])) == 0.0

    def test_onset_density_counts_peaks_per_second(self):
        onset = np.zeros(100)
        onset[[10, 30, 50]] = 1.0
        density = RhythmAnalyzer(hop_length=512, sr=44100).onset_density(onset)
        assert density == pytest.approx(3 / (100 * 512 / 44100))

    def test_onset_density_ignores_weak_peaks(self):
        onset = np.full(100, 1.0)
        onset[20] = 1.2  # below 1.5x the mean
        onset[60] = 5.0
        density = RhythmAnalyzer(hop_length=512, sr=44100).onset_density(onset)
        assert density == pytest.approx(1 / (100 * 512 / 44100))

    def test_empty_onset(self):
        features = RhythmAnalyzer().analyze(np.array([]))
        assert (features.strength, features.regularity, features.onset_density) == (0.0, 0.0, 0.0)

    def test_beat_histogram_centred_on_tempo(self):
        histogram = RhythmAnalyzer().beat_histogram(120.0)
        assert len(histogram) == 100
        assert int(np.argmax(histogram)) == 60
        assert histogram[60] == pytest.approx(1.0)
        assert histogram[50] == pytest.approx(np.exp(-1.0))
        assert (histogram > 0).all()
