from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
from typing import List, Optional, Tuple

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from .models import ChartDataSet, ChartPoint, SimulationMetrics, SimulationParameters

LINE_HEIGHT = 0.18 * inch


def report_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"netsight_report_{now.strftime('%Y%m%dT%H%M%SZ')}.pdf"


def _parameter_lines(params: SimulationParameters) -> List[str]:
    return [
        f"Network type: {params.network_type.value}",
        f"Modulation: {params.modulation.value}",
        f"Channel coding: {params.channel_coding.value}",
        f"Bandwidth: {params.bandwidth:g} MHz",
        f"Distance: {params.distance:g} m",
        f"Noise level: {params.noise_level:g} dBm",
    ]


def _metric_lines(metrics: SimulationMetrics) -> List[str]:
    return [
        f"Path loss: {metrics.path_loss:.2f} dB",
        f"Signal strength: {metrics.signal_strength:.2f} dBm",
        f"SNR: {metrics.snr:.2f} dB",
        f"Throughput: {metrics.throughput:.2f} Mbps",
        f"BER: {metrics.ber:.3e}",
        f"Coded BER: {metrics.coded_ber:.3e}",
    ]


def _series_lines(points: List[ChartPoint], x_fmt: str, y_fmt: str) -> List[str]:
    return [f"{p.x:{x_fmt}}  ->  {p.y:{y_fmt}}" for p in points]


def build_pdf(
    params: SimulationParameters,
    metrics: SimulationMetrics,
    charts: ChartDataSet,
    title: str,
    generated_at: Optional[datetime] = None,
) -> bytes:
    generated_at = generated_at or datetime.now(timezone.utc)
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setTitle(title)
    width, height = letter

    c.setFont("Helvetica-Bold", 16)
    c.drawString(1 * inch, height - 1 * inch, title)
    c.setFont("Helvetica", 10)
    c.drawString(1 * inch, height - 1.3 * inch, f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}")

    y = height - 1.8 * inch

    sections: List[Tuple[str, List[str]]] = [
        ("Parameters", _parameter_lines(params)),
        ("Metrics", _metric_lines(metrics)),
        ("Signal strength vs distance (m -> dBm)", _series_lines(charts.signal_vs_distance, "g", ".2f")),
        ("BER vs SNR (dB -> BER)", _series_lines(charts.ber_vs_snr, "g", ".3e")),
        ("Throughput vs bandwidth (MHz -> Mbps)", _series_lines(charts.throughput_vs_bandwidth, "g", ".2f")),
    ]

    for heading, lines in sections:
        if y < 1.5 * inch:
            c.showPage()
            y = height - 1 * inch
        c.setFont("Helvetica-Bold", 12)
        c.drawString(1 * inch, y, heading)
        y -= 0.25 * inch

        c.setFont("Helvetica", 10)
        for line in lines:
            if y < 1 * inch:
                c.showPage()
                c.setFont("Helvetica", 10)
                y = height - 1 * inch
            c.drawString(1.2 * inch, y, line)
            y -= LINE_HEIGHT
        y -= 0.2 * inch

    c.showPage()
    c.save()
    return buf.getvalue()
