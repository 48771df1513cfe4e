from typing import Optional

from tello_native.models.telemetry import (
    AltLimitInfo,
    FlightData,
    LightInfo,
    LogMessage,
    PackageData,
    VersionInfo,
    WifiInfo,
)


class DroneMeta:
    """Latest decoded telemetry sample per category."""

    def __init__(self) -> None:
        self.flight_data: Optional[FlightData] = None
        self.wifi: Optional[WifiInfo] = None
        self.light: Optional[LightInfo] = None
        self.version: Optional[str] = None
        self.alt_limit: Optional[int] = None
        self.last_log: Optional[LogMessage] = None

    def update(self, data: PackageData) -> None:
        if isinstance(data, FlightData):
            self.flight_data = data
        elif isinstance(data, WifiInfo):
            self.wifi = data
        elif isinstance(data, LightInfo):
            self.light = data
        elif isinstance(data, VersionInfo):
            self.version = data.version
        elif isinstance(data, AltLimitInfo):
            self.alt_limit = data.limit
        elif isinstance(data, LogMessage):
            self.last_log = data

    def get_flight_data(self) -> Optional[FlightData]:
        return self.flight_data

    def get_wifi_info(self) -> Optional[WifiInfo]:
        return self.wifi

    def get_light_info(self) -> Optional[LightInfo]:
        return self.light

    def get_version(self) -> Optional[str]:
        return self.version

    def get_alt_limit(self) -> Optional[int]:
        return self.alt_limit
