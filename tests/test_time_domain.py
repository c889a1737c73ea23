"""Tests for time-domain and spectral-proxy features."""

import pytest
import numpy as np
from moodtagger.analysis import SpectralApproximator, TimeDomainExtractor
from moodtagger.core.constants import ENVELOPE_POINTS, WAVEFORM_PREVIEW_POINTS

from generate_test_audio import generate_sine_wave


@pytest.fixture
def extractor():
    return TimeDomainExtractor()


class TestEnergyAndCrossings:
    """Test RMS energy and zero-crossing rate."""

    def test_alternating_signal_crossings(self, extractor):
        """Three sign changes over four samples."""
        zcr = extractor.zero_crossing_rate(np.array([1.0, -1.0, 1.0, -1.0]))
        assert zcr == pytest.approx(0.75)

    def test_silence_has_no_energy_or_crossings(self, extractor):
        silence = np.zeros(44100)
        assert extractor.rms(silence) == 0.0
        assert extractor.zero_crossing_rate(silence) == 0.0

    def test_empty_buffer(self, extractor):
        empty = np.array([])
        assert extractor.rms(empty) == 0.0
        assert extractor.zero_crossing_rate(empty) == 0.0

    def test_rms_of_constant_signal(self, extractor):
        assert extractor.rms(np.full(100, -0.5)) == pytest.approx(0.5)

    def test_rms_of_sine(self, extractor):
        """RMS of a sine is amplitude / sqrt(2)."""
        sine = generate_sine_wave(440.0, 1.0, amplitude=0.8)
        assert extractor.rms(sine) == pytest.approx(0.8 / np.sqrt(2), rel=1e-3)

    def test_sine_crossing_rate_tracks_frequency(self, extractor):
        """A 441 Hz sine crosses zero about twice per period."""
        sine = generate_sine_wave(441.0, 1.0)
        assert extractor.zero_crossing_rate(sine) == pytest.approx(2 * 441 / 44100, rel=0.01)


class TestEnergyEnvelope:
    """Test the fixed-length energy envelope."""

    @pytest.mark.parametrize("n_samples", [1, 10, 999, 1000, 1001, 44100])
    def test_envelope_always_has_fixed_length(self, extractor, n_samples):
        envelope = extractor.energy_envelope(np.ones(n_samples))
        assert len(envelope) == ENVELOPE_POINTS
        np.testing.assert_allclose(envelope, 1.0)

    def test_empty_buffer_gives_zero_envelope(self, extractor):
        envelope = extractor.energy_envelope(np.array([]))
        assert len(envelope) == ENVELOPE_POINTS
        assert not envelope.any()

    def test_last_window_absorbs_remainder(self, extractor):
        """1001 samples: the last bin averages the final two samples."""
        samples = np.append(np.ones(1000), -3.0)
        envelope = extractor.energy_envelope(samples)
        assert envelope[-1] == pytest.approx(2.0)
        np.testing.assert_allclose(envelope[:-1], 1.0)

    def test_envelope_follows_loudness(self, extractor):
        samples = np.concatenate([np.full(5000, 0.1), np.full(5000, 0.9)])
        envelope = extractor.energy_envelope(samples)
        assert envelope[0] == pytest.approx(0.1)
        assert envelope[-1] == pytest.approx(0.9)


class TestBandPresence:
    """Test the zero-crossing based band presence proxies."""

    def test_no_crossings_is_all_bass(self, extractor):
        presence = extractor.band_presence(0.0)
        assert (presence.bass, presence.mid, presence.high) == (1.0, 0.0, 0.0)

    def test_full_crossings_is_all_high(self, extractor):
        presence = extractor.band_presence(1.0)
        assert (presence.bass, presence.mid, presence.high) == (0.0, 0.0, 1.0)

    def test_mid_peaks_at_one_tenth(self, extractor):
        presence = extractor.band_presence(0.1)
        assert presence.bass == pytest.approx(0.5)
        assert presence.mid == pytest.approx(1.0)
        assert presence.high == pytest.approx(0.5)

    @pytest.mark.parametrize("zcr", np.linspace(0.0, 1.0, 21))
    def test_presence_is_clamped(self, extractor, zcr):
        presence = extractor.band_presence(zcr)
        for value in (presence.bass, presence.mid, presence.high):
            assert 0.0 <= value <= 1.0


class TestWaveformPreview:
    """Test waveform downsampling."""

    def test_long_buffer_is_downsampled(self, extractor):
        preview = extractor.waveform_preview(np.arange(50000, dtype=np.float64))
        assert len(preview) == WAVEFORM_PREVIEW_POINTS
        assert preview[0] == 0.0
        assert preview[1] == 5.0

    def test_short_buffer_is_kept(self, extractor):
        samples = np.linspace(-1, 1, 500)
        np.testing.assert_array_equal(extractor.waveform_preview(samples), samples)

    def test_extract_combines_features(self, extractor):
        features = extractor.extract(np.array([0.5, -0.5] * 50))
        assert features.rms_energy == pytest.approx(0.5)
        assert features.zero_crossing_rate == pytest.approx(0.99)
        assert len(features.energy_envelope) == ENVELOPE_POINTS
        assert len(features.waveform) == 100
        assert features.presence.high == 1.0


class TestSpectralApproximator:
    """Test the spectral proxies derived from zero crossings."""

    def test_centroid_and_rolloff_scale_crossing_rate(self):
        spectral = SpectralApproximator().extract(np.zeros(10), zcr=0.05)
        assert spectral.centroid == pytest.approx(500.0)
        assert spectral.rolloff == pytest.approx(750.0)

    def test_flatness_is_constant(self):
        approximator = SpectralApproximator()
        assert approximator.extract(np.zeros(10), 0.0).flatness == 0.5
        assert approximator.extract(np.random.default_rng(0).uniform(-1, 1, 100), 0.4).flatness == 0.5

    def test_flux_is_mean_absolute_difference(self):
        assert SpectralApproximator().flux(np.array([0.0, 1.0, 0.0, 1.0])) == pytest.approx(1.0)

    def test_flux_of_short_buffers(self):
        approximator = SpectralApproximator()
        assert approximator.flux(np.array([])) == 0.0
        assert approximator.flux(np.array([0.7])) == 0.0
