#Purpose: ETA health classification for a single delivery stop.
#The numeric ETA-vs-promise comparison happens upstream; we receive one of
#EARLY | ON_TIME | LATE | CRITICAL and map it to a display band.
#Anything else (None, "", typos, non-strings) maps to the neutral UNKNOWN band.
#Never raises.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class EtaBand:
    """
    Display band for an ETA status: a label plus a background/foreground color pair.
    """
    key: str
    label: str
    background: str
    foreground: str

    @property
    def is_known(self) -> bool:
        return self.key != UNKNOWN_BAND.key


UNKNOWN_BAND = EtaBand(key="UNKNOWN", label="Unknown", background="#f3f4f6", foreground="#6b7280")

ETA_BANDS: Dict[str, EtaBand] = {
    "EARLY": EtaBand(key="EARLY", label="Early", background="#dcfce7", foreground="#16a34a"),
    "ON_TIME": EtaBand(key="ON_TIME", label="On time", background="#dbeafe", foreground="#1d4ed8"),
    "LATE": EtaBand(key="LATE", label="Late", background="#fef9c3", foreground="#a16207"),
    "CRITICAL": EtaBand(key="CRITICAL", label="Critical", background="#fee2e2", foreground="#dc2626"),
}


def classify_eta(eta_status: Any) -> EtaBand:
    """
    Map an upstream ETA status string to its display band.

    Matching is exact on the upstream value (case-sensitive); the
    upstream contract only ever sends the four uppercase keys.
    """
    if not isinstance(eta_status, str):
        return UNKNOWN_BAND
    return ETA_BANDS.get(eta_status, UNKNOWN_BAND)
