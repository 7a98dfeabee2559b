"""
This package defines the value objects of the bthomecodec library: typed
measurements, the decoded payload envelope, and the structured button,
dimmer and firmware-version readings.

The chainable ``Packet`` builder lives in ``bthomecodec.domain.packet``.
"""
from bthomecodec.domain.measurement import (
    ButtonEvent,
    DecodedData,
    DimmerEvent,
    DimmerValue,
    FirmwareVersion,
    Measurement,
    UNKNOWN_TYPE,
)

__all__ = [
    "ButtonEvent",
    "DecodedData",
    "DimmerEvent",
    "DimmerValue",
    "FirmwareVersion",
    "Measurement",
    "UNKNOWN_TYPE",
]
