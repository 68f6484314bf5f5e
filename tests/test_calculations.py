from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from netsight.calculations import (
    calculate_ber,
    calculate_coded_ber,
    calculate_path_loss,
    calculate_throughput,
    carrier_for,
    compute_chart_data,
    compute_metrics,
    run_simulation,
)
from netsight.constants import INITIAL_PARAMS, TX_POWER_DBM
from netsight.models import ChannelCoding, Modulation, NetworkType, SimulationParameters


def make_params(**overrides) -> SimulationParameters:
    values = dict(INITIAL_PARAMS)
    values.update(overrides)
    return SimulationParameters(**values)


def test_reference_scenario_golden():
    # 5G / 64-QAM / LDPC / 20 MHz / 500 m / -95 dBm
    m = compute_metrics(make_params())

    assert m.path_loss == pytest.approx(157.2608, abs=1e-3)
    assert m.signal_strength == pytest.approx(-111.2608, abs=1e-3)
    assert m.snr == pytest.approx(-16.2608, abs=1e-3)
    # snr below -10 dB carries nothing
    assert m.throughput == 0.0
    assert m.ber == pytest.approx(0.49944, abs=1e-4)
    assert m.coded_ber == pytest.approx(0.49776, abs=1e-4)


def test_4g_uses_lower_carrier():
    assert carrier_for(NetworkType.LTE) == (2600.0, 32.4)
    assert carrier_for("5G") == (3500.0, 32.4)

    lte = compute_metrics(make_params(network_type="4G"))
    nr = compute_metrics(make_params(network_type="5G"))
    assert lte.path_loss == pytest.approx(154.679, abs=1e-3)
    assert lte.signal_strength > nr.signal_strength


def test_degenerate_distance_has_no_path_loss():
    assert calculate_path_loss(0.0, 3500.0, 32.4) == 0.0
    assert calculate_path_loss(-5.0, 2600.0, 32.4) == 0.0

    # Bypass validation to reach the floor through the full pipeline
    params = SimulationParameters.model_construct(**{**make_params().model_dump(), "distance": 0.0})
    m = compute_metrics(params)
    assert m.path_loss == 0.0
    assert m.signal_strength == TX_POWER_DBM == 46.0


def test_throughput_capped_by_modulation():
    # log2(1 + 10^4) is about 13.3 bits, well above any cap
    assert calculate_throughput(40.0, 20.0, Modulation.QAM256) == pytest.approx(160.0)
    assert calculate_throughput(40.0, 20.0, Modulation.QPSK) == pytest.approx(40.0)
    # At 0 dB Shannon gives exactly 1 bit/s/Hz
    assert calculate_throughput(0.0, 10.0, Modulation.QAM64) == pytest.approx(10.0)


def test_throughput_cutoff_at_minus_ten_db():
    assert calculate_throughput(-10.01, 50.0, "QPSK") == 0.0
    assert calculate_throughput(-10.0, 50.0, "QPSK") == pytest.approx(50.0 * math.log2(1.1))


def test_ber_clamped():
    low = calculate_ber(-50.0, "QPSK")
    assert low <= 0.5
    assert low == pytest.approx(0.5, abs=1e-4)
    assert calculate_ber(40.0, "QPSK") == 1e-9
    assert calculate_ber(10.0, "16-QAM") == pytest.approx(0.5 * math.exp(-0.5 * 10.0 / 2.5))


def test_unknown_modulation_fallbacks():
    # BER falls back to the QPSK profile
    for snr in (-5.0, 0.0, 5.0, 12.0):
        assert calculate_ber(snr, "BPSK") == calculate_ber(snr, "QPSK")
    # Throughput falls back to a raw efficiency of 2 bits
    assert calculate_throughput(30.0, 10.0, "BPSK") == pytest.approx(20.0)
    assert calculate_throughput(0.0, 10.0, "BPSK") == pytest.approx(10.0)


def test_unknown_coding_has_no_gain():
    assert calculate_coded_ber(3.0, "QPSK", "Turbo") == calculate_ber(3.0, "QPSK")
    assert calculate_coded_ber(3.0, "QPSK", ChannelCoding.NONE) == calculate_ber(3.0, "QPSK")
    assert calculate_coded_ber(3.0, "QPSK", ChannelCoding.HAMMING) == calculate_ber(5.5, "QPSK")


@pytest.mark.parametrize("network_type", ["4G", "5G"])
@pytest.mark.parametrize("modulation", [m.value for m in Modulation])
@pytest.mark.parametrize("coding", [c.value for c in ChannelCoding])
def test_ber_bounds_and_coding_gain(network_type, modulation, coding):
    for distance in (10.0, 50.0, 200.0, 1000.0, 5000.0):
        for noise in (-120.0, -110.0, -90.0, -30.0):
            m = compute_metrics(
                make_params(
                    network_type=network_type,
                    modulation=modulation,
                    channel_coding=coding,
                    distance=distance,
                    noise_level=noise,
                )
            )
            assert 1e-9 <= m.ber <= 0.5
            assert 1e-9 <= m.coded_ber <= 0.5
            assert m.coded_ber <= m.ber
            if coding == "None":
                assert m.coded_ber == m.ber


def test_throughput_non_decreasing_in_bandwidth():
    for noise in (-120.0, -100.0):
        previous = -1.0
        for bw in range(1, 101):
            m = compute_metrics(make_params(distance=10.0, noise_level=noise, bandwidth=float(bw)))
            assert m.throughput >= previous
            previous = m.throughput


def test_signal_non_increasing_in_distance():
    previous = float("inf")
    for d in range(10, 5001, 37):
        m = compute_metrics(make_params(distance=float(d)))
        assert m.signal_strength <= previous
        previous = m.signal_strength


def test_chart_sweep_shapes():
    charts = compute_chart_data(make_params())

    assert [p.x for p in charts.signal_vs_distance] == list(range(10, 5000, 100))
    assert len(charts.signal_vs_distance) == 50
    assert [p.x for p in charts.ber_vs_snr] == list(range(-10, 41))
    assert len(charts.ber_vs_snr) == 51
    assert [p.x for p in charts.throughput_vs_bandwidth] == list(range(1, 100, 5))
    assert len(charts.throughput_vs_bandwidth) == 20


def test_chart_sweep_values():
    params = make_params(distance=10.0, noise_level=-120.0, modulation="16-QAM")
    charts = compute_chart_data(params)

    first = charts.signal_vs_distance[0]
    assert first.y == round(compute_metrics(params).signal_strength, 2)
    assert all(p.y == round(p.y, 2) for p in charts.signal_vs_distance)
    assert all(p.y == round(p.y, 2) for p in charts.throughput_vs_bandwidth)

    # BER curve ignores distance/noise and is not rounded
    for p in charts.ber_vs_snr:
        assert p.y == calculate_ber(p.x, "16-QAM")
    assert charts.ber_vs_snr[-1].y == 1e-9

    # Strong link: throughput follows bandwidth * 4 bits
    assert charts.throughput_vs_bandwidth[-1].y == pytest.approx(96 * 4.0)


def test_run_simulation_bundles_everything():
    params = make_params()
    result = run_simulation(params)
    assert result.parameters == params
    assert result.metrics == compute_metrics(params)
    assert result.charts == compute_chart_data(params)


@pytest.mark.parametrize(
    "field, value",
    [
        ("bandwidth", 0.5),
        ("bandwidth", 100.5),
        ("distance", 9.9),
        ("distance", 5001.0),
        ("noise_level", -121.0),
        ("noise_level", -29.0),
        ("network_type", "3G"),
        ("modulation", "BPSK"),
        ("channel_coding", "Turbo"),
    ],
)
def test_out_of_domain_parameters_rejected(field, value):
    with pytest.raises(ValidationError):
        make_params(**{field: value})


def test_parameters_are_immutable_and_coding_defaults_to_none():
    values = dict(INITIAL_PARAMS)
    values.pop("channel_coding")
    params = SimulationParameters(**values)
    assert params.channel_coding is ChannelCoding.NONE
    with pytest.raises(ValidationError):
        params.distance = 100.0
