import numpy as np
import pytest

from audio.buffers import SampleBuffer
from audio.mixer import (
    PAN_LEFT,
    PAN_RIGHT,
    GainCell,
    MixGraph,
    MixSource,
    contribution,
    fold_to_mono,
)


def test_fold_to_mono_passes_mono_through_unchanged(ramp_buffer):
    buffer = ramp_buffer(32)
    assert fold_to_mono(buffer) is buffer.channels[0]


def test_fold_to_mono_averages_channels_equally():
    buffer = SampleBuffer.from_channels([[1.0, 0.5, -1.0], [0.0, 0.25, 1.0], [0.5, 0.0, 0.0]], 8_000)
    np.testing.assert_allclose(fold_to_mono(buffer), [0.5, 0.25, 0.0], atol=1e-7)


@pytest.mark.parametrize("gain", [0.0, 0.35, 1.0, 2.5])
@pytest.mark.parametrize("pan", [PAN_LEFT, PAN_RIGHT])
def test_single_source_contribution_is_gain_times_mono_on_one_side(ramp_buffer, gain, pan):
    buffer = ramp_buffer(100, channels=2)
    output = contribution(buffer, gain, pan)

    active = 0 if pan == PAN_LEFT else 1
    expected = fold_to_mono(buffer) * np.float32(gain)
    np.testing.assert_array_equal(output[:, active], expected)
    np.testing.assert_array_equal(output[:, 1 - active], np.zeros(100, dtype=np.float32))


def test_zero_gain_yields_exact_silence(ramp_buffer):
    output = contribution(ramp_buffer(16), 0.0, PAN_LEFT)
    assert not np.any(output)


def test_mix_block_sums_both_sides_without_limiting():
    left = SampleBuffer.from_channels([[0.9, 0.9, 0.9]], 8_000)
    right = SampleBuffer.from_channels([[0.5, 0.5]], 8_000)
    graph = MixGraph()
    graph.add_source(MixSource("l", buffer=left, pan=PAN_LEFT, gain=GainCell(2.0)))
    graph.add_source(MixSource("r", buffer=right, pan=PAN_RIGHT, gain=GainCell(0.5)))

    block = graph.mix_block(0, 4)
    np.testing.assert_allclose(block[:, 0], [1.8, 1.8, 1.8, 0.0], rtol=1e-6)
    np.testing.assert_allclose(block[:, 1], [0.25, 0.25, 0.0, 0.0])
    assert graph.frame_count == 3


def test_mix_block_past_the_end_is_silence(ramp_buffer):
    graph = MixGraph()
    graph.add_source(MixSource("l", buffer=ramp_buffer(10), pan=PAN_LEFT))
    assert not np.any(graph.mix_block(10, 8))
    assert graph.mix_block(0, 0).shape == (0, 2)


def test_block_size_does_not_change_the_mix(ramp_buffer):
    graph = MixGraph()
    graph.add_source(MixSource("l", buffer=ramp_buffer(1_000, channels=2), pan=PAN_LEFT, gain=GainCell(0.7)))
    graph.add_source(MixSource("r", buffer=ramp_buffer(777), pan=PAN_RIGHT, gain=GainCell(1.3)))

    whole = graph.render(1_000, block_size=1_000)
    np.testing.assert_array_equal(graph.render(1_000, block_size=64), whole)
    np.testing.assert_array_equal(graph.render(1_000, block_size=1), whole)


def test_gain_cell_updates_apply_on_next_block(ramp_buffer):
    cell = GainCell(1.0)
    source = MixSource("l", buffer=ramp_buffer(8, scale=1.0), pan=PAN_LEFT, gain=cell)
    graph = MixGraph()
    graph.add_source(source)

    first = graph.mix_block(0, 4)
    cell.set(0.0)
    second = graph.mix_block(4, 4)
    assert np.any(first[:, 0])
    assert not np.any(second)


@pytest.mark.parametrize("value", [-0.1, float("nan")])
def test_gain_cell_rejects_negative_and_nan(value):
    with pytest.raises(ValueError):
        GainCell(value)
    cell = GainCell()
    with pytest.raises(ValueError):
        cell.set(value)
    assert cell.value == 1.0


def test_pan_is_fixed_to_the_extremes(ramp_buffer):
    with pytest.raises(ValueError, match="Pan is fixed"):
        MixSource("centre", buffer=ramp_buffer(4), pan=0.0)


def test_graph_accepts_one_source_per_side(ramp_buffer):
    graph = MixGraph()
    graph.add_source(MixSource("a", buffer=ramp_buffer(4), pan=PAN_LEFT))
    with pytest.raises(ValueError, match="left source"):
        graph.add_source(MixSource("b", buffer=ramp_buffer(4), pan=PAN_LEFT))


def test_describe_lists_sources_left_first(ramp_buffer):
    graph = MixGraph()
    graph.add_source(MixSource("r", buffer=ramp_buffer(4), pan=PAN_RIGHT, gain=GainCell(0.5)))
    graph.add_source(MixSource("l", buffer=ramp_buffer(6, channels=2), pan=PAN_LEFT))
    summary = graph.describe()
    assert [entry["name"] for entry in summary] == ["l", "r"]
    assert summary[0]["channels"] == 2
    assert summary[1]["gain"] == 0.5
