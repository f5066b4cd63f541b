"""The fixed detector set run for every analysis"""

from typing import Dict

from fraud_gateway.domain.detectors.base import Detector
from fraud_gateway.domain.detectors.behavioral import detect_behavioral
from fraud_gateway.domain.detectors.device import detect_device
from fraud_gateway.domain.detectors.geolocation import detect_geolocation
from fraud_gateway.domain.detectors.network import detect_network
from fraud_gateway.domain.detectors.pattern import detect_patterns
from fraud_gateway.domain.detectors.velocity import detect_velocity

DETECTORS: Dict[str, Detector] = {
    "velocity": detect_velocity,
    "behavioral": detect_behavioral,
    "geolocation": detect_geolocation,
    "device": detect_device,
    "pattern": detect_patterns,
    "network": detect_network,
}
