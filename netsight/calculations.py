"""Closed-form link formulas and the chart sweeps built on them.

The models are illustrative, not validated channel models: free-space path
loss, a Shannon-Hartley estimate capped by the modulation's bits per symbol,
and an exponential BER approximation shifted by a fixed coding gain.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import List, Union

from .constants import (
    BANDWIDTH_SWEEP_MHZ,
    BER_CEILING,
    BER_FLOOR,
    CODING_GAIN_DB,
    DEFAULT_BER_PROFILE,
    DEFAULT_SPECTRAL_EFFICIENCY,
    DISTANCE_SWEEP_M,
    FREQUENCY_4G_MHZ,
    FREQUENCY_5G_MHZ,
    MIN_THROUGHPUT_SNR_DB,
    MODULATION_PROFILES,
    PATH_LOSS_CONSTANT_4G,
    PATH_LOSS_CONSTANT_5G,
    SNR_SWEEP_DB,
    TX_POWER_DBM,
)
from .models import (
    ChartDataSet,
    ChartPoint,
    SimulationMetrics,
    SimulationParameters,
    SimulationResult,
)

Key = Union[str, Enum]


def _key(value: Key) -> str:
    return value.value if isinstance(value, Enum) else value


def _db_to_linear(value_db: float) -> float:
    return 10.0 ** (value_db / 10.0)


def _sweep(bounds) -> range:
    start, stop, step = bounds
    return range(start, stop + 1, step)


def carrier_for(network_type: Key):
    """Return (frequency_mhz, path_loss_constant); anything but 5G is 4G."""
    if _key(network_type) == "5G":
        return FREQUENCY_5G_MHZ, PATH_LOSS_CONSTANT_5G
    return FREQUENCY_4G_MHZ, PATH_LOSS_CONSTANT_4G


def calculate_path_loss(distance_m: float, frequency_mhz: float, constant: float) -> float:
    # Floor for the degenerate case, not a physical result
    if distance_m <= 0:
        return 0.0
    return 20.0 * math.log10(distance_m) + 20.0 * math.log10(frequency_mhz) + constant


def calculate_snr(signal_strength_dbm: float, noise_level_dbm: float) -> float:
    return signal_strength_dbm - noise_level_dbm


def calculate_throughput(snr_db: float, bandwidth_mhz: float, modulation: Key) -> float:
    """Shannon-Hartley estimate in Mbps, capped at the modulation's bits per symbol."""
    if snr_db < MIN_THROUGHPUT_SNR_DB:
        return 0.0
    profile = MODULATION_PROFILES.get(_key(modulation))
    efficiency = profile.spectral_efficiency_bits if profile else DEFAULT_SPECTRAL_EFFICIENCY
    theoretical = math.log2(1.0 + _db_to_linear(snr_db))
    return bandwidth_mhz * min(efficiency, theoretical)


def calculate_ber(snr_db: float, modulation: Key) -> float:
    """Exponential BER approximation clamped to [1e-9, 0.5]."""
    profile = MODULATION_PROFILES.get(_key(modulation), DEFAULT_BER_PROFILE)
    ber = 0.5 * math.exp(-0.5 * _db_to_linear(snr_db) / profile.ber_factor)
    return max(BER_FLOOR, min(ber, BER_CEILING))


def calculate_coded_ber(snr_db: float, modulation: Key, channel_coding: Key) -> float:
    gain = CODING_GAIN_DB.get(_key(channel_coding), 0.0)
    return calculate_ber(snr_db + gain, modulation)


def compute_metrics(params: SimulationParameters) -> SimulationMetrics:
    frequency_mhz, constant = carrier_for(params.network_type)

    path_loss = calculate_path_loss(params.distance, frequency_mhz, constant)
    signal_strength = TX_POWER_DBM - path_loss
    snr = calculate_snr(signal_strength, params.noise_level)

    return SimulationMetrics(
        path_loss=path_loss,
        signal_strength=signal_strength,
        snr=snr,
        throughput=calculate_throughput(snr, params.bandwidth, params.modulation),
        ber=calculate_ber(snr, params.modulation),
        coded_ber=calculate_coded_ber(snr, params.modulation, params.channel_coding),
    )


def compute_chart_data(base_params: SimulationParameters) -> ChartDataSet:
    """Sweep one input at a time while holding the rest of base_params fixed."""
    signal_vs_distance: List[ChartPoint] = []
    for d in _sweep(DISTANCE_SWEEP_M):
        metrics = compute_metrics(base_params.model_copy(update={"distance": float(d)}))
        signal_vs_distance.append(ChartPoint(x=d, y=round(metrics.signal_strength, 2)))

    # Theoretical curve straight from SNR, independent of distance and noise.
    # Left unrounded so log-scale plots keep their shape.
    ber_vs_snr = [
        ChartPoint(x=s, y=calculate_ber(float(s), base_params.modulation))
        for s in _sweep(SNR_SWEEP_DB)
    ]

    throughput_vs_bandwidth: List[ChartPoint] = []
    for b in _sweep(BANDWIDTH_SWEEP_MHZ):
        metrics = compute_metrics(base_params.model_copy(update={"bandwidth": float(b)}))
        throughput_vs_bandwidth.append(ChartPoint(x=b, y=round(metrics.throughput, 2)))

    return ChartDataSet(
        signal_vs_distance=signal_vs_distance,
        ber_vs_snr=ber_vs_snr,
        throughput_vs_bandwidth=throughput_vs_bandwidth,
    )


def run_simulation(params: SimulationParameters) -> SimulationResult:
    return SimulationResult(
        parameters=params,
        metrics=compute_metrics(params),
        charts=compute_chart_data(params),
    )
