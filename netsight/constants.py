from __future__ import annotations

from typing import Dict, NamedTuple

# Radio model constants
TX_POWER_DBM = 46.0  # Typical macro cell transmit power
PATH_LOSS_CONSTANT_4G = 32.4
PATH_LOSS_CONSTANT_5G = 32.4
FREQUENCY_4G_MHZ = 2600.0
FREQUENCY_5G_MHZ = 3500.0

# Throughput is zero below this SNR
MIN_THROUGHPUT_SNR_DB = -10.0

BER_FLOOR = 1e-9
BER_CEILING = 0.5


class ModulationProfile(NamedTuple):
    ber_factor: float
    spectral_efficiency_bits: float


MODULATION_PROFILES: Dict[str, ModulationProfile] = {
    "QPSK": ModulationProfile(ber_factor=0.5, spectral_efficiency_bits=2),
    "16-QAM": ModulationProfile(ber_factor=2.5, spectral_efficiency_bits=4),
    "64-QAM": ModulationProfile(ber_factor=10.5, spectral_efficiency_bits=6),
    "256-QAM": ModulationProfile(ber_factor=40.5, spectral_efficiency_bits=8),
}

# Fallbacks for modulation keys missing from the table
DEFAULT_BER_PROFILE = MODULATION_PROFILES["QPSK"]
DEFAULT_SPECTRAL_EFFICIENCY = 2.0

CODING_GAIN_DB: Dict[str, float] = {
    "None": 0.0,
    "Hamming": 2.5,
    "LDPC": 6.0,
}

# Parameter domains (inclusive)
BANDWIDTH_MHZ_RANGE = (1.0, 100.0)
DISTANCE_M_RANGE = (10.0, 5000.0)
NOISE_LEVEL_DBM_RANGE = (-120.0, -30.0)

# Chart sweeps: (start, stop inclusive, step)
DISTANCE_SWEEP_M = (10, 5000, 100)
SNR_SWEEP_DB = (-10, 40, 1)
BANDWIDTH_SWEEP_MHZ = (1, 100, 5)

INITIAL_PARAMS = {
    "network_type": "5G",
    "modulation": "64-QAM",
    "channel_coding": "LDPC",
    "bandwidth": 20.0,
    "distance": 500.0,
    "noise_level": -95.0,
}

AI_GOALS: Dict[str, str] = {
    "maximize_throughput": "Maximize throughput",
    "minimize_ber": "Minimize bit error rate",
    "balanced": "Balance throughput and reliability",
}

AI_SUGGESTION_ERROR = "Failed to get AI suggestions. Please try again."
