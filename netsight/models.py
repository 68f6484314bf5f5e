from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .constants import BANDWIDTH_MHZ_RANGE, DISTANCE_M_RANGE, NOISE_LEVEL_DBM_RANGE


class NetworkType(str, Enum):
    LTE = "4G"
    NR = "5G"


class Modulation(str, Enum):
    QPSK = "QPSK"
    QAM16 = "16-QAM"
    QAM64 = "64-QAM"
    QAM256 = "256-QAM"


class ChannelCoding(str, Enum):
    NONE = "None"
    HAMMING = "Hamming"
    LDPC = "LDPC"


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class SimulationParameters(BaseModel):
    """One snapshot of the user's link parameters.

    Building an instance is the validation step: values outside the
    documented domains raise ``pydantic.ValidationError`` and nothing is
    computed.
    """

    model_config = ConfigDict(frozen=True)

    network_type: NetworkType
    modulation: Modulation
    channel_coding: ChannelCoding = ChannelCoding.NONE
    bandwidth: float = Field(
        ..., ge=BANDWIDTH_MHZ_RANGE[0], le=BANDWIDTH_MHZ_RANGE[1], description="Bandwidth in MHz"
    )
    distance: float = Field(
        ..., ge=DISTANCE_M_RANGE[0], le=DISTANCE_M_RANGE[1], description="Distance to the cell in meters"
    )
    noise_level: float = Field(
        ..., ge=NOISE_LEVEL_DBM_RANGE[0], le=NOISE_LEVEL_DBM_RANGE[1], description="Noise floor in dBm"
    )


class SimulationMetrics(BaseModel):
    path_loss: float  # dB
    signal_strength: float  # dBm
    snr: float  # dB
    throughput: float  # Mbps
    ber: float
    coded_ber: float


class ChartPoint(BaseModel):
    x: float
    y: float


class ChartDataSet(BaseModel):
    signal_vs_distance: List[ChartPoint]
    ber_vs_snr: List[ChartPoint]
    throughput_vs_bandwidth: List[ChartPoint]


class SimulationResult(BaseModel):
    parameters: SimulationParameters
    metrics: SimulationMetrics
    charts: ChartDataSet


class OptionsResponse(BaseModel):
    network_types: List[str]
    modulations: List[str]
    channel_codings: List[str]
    bounds: Dict[str, Tuple[float, float]]
    initial_parameters: SimulationParameters
    goals: Dict[str, str]


class SuggestionRequest(BaseModel):
    network_type: NetworkType
    goal: str = Field(..., min_length=1, max_length=500)
    user_constraints: Optional[str] = Field(None, max_length=2000)

    @field_validator("goal")
    @classmethod
    def goal_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("goal must not be blank")
        return v


class SuggestedParameters(BaseModel):
    # Models sometimes answer with camelCase keys
    model_config = ConfigDict(populate_by_name=True)

    modulation: str
    bandwidth: float
    distance: float
    noise_level: float = Field(..., validation_alias=AliasChoices("noise_level", "noiseLevel"))


class SuggestionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    suggested_parameters: SuggestedParameters = Field(
        ..., validation_alias=AliasChoices("suggested_parameters", "suggestedParameters")
    )
    reasoning: str


class ReportRequest(BaseModel):
    parameters: SimulationParameters
    title: str = Field("NetSight Analyzer Report", max_length=120)
