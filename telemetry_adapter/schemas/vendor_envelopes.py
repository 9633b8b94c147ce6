"""
Vendor API envelope schemas.

Pydantic models for the request and response bodies of the supported vendor
APIs. Field aliases carry the vendor's JSON key names; attribute names are
snake_case. Response models are frozen: a decoded envelope is never mutated
during normalization.

- HOBOlink: POST a query for one or more loggers, receive an
  ``observationList``.
- iMonnit: GET ``sensorlist`` / ``networklist`` for an account token,
  receive ``{"Method": ..., "Result": [...]}``.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# HOBOlink


class HobolinkAuthentication(BaseModel):
    """Credentials block of a HOBOlink data request"""

    user: str = ""
    password: str = ""
    token: str = ""


class HobolinkQuery(BaseModel):
    """Time window and logger selection of a HOBOlink data request"""

    start_date_time: datetime
    end_date_time: datetime
    loggers: List[str] = Field(
        default_factory=list, description="Logger serial numbers; empty = all"
    )


class HobolinkRequest(BaseModel):
    """Body POSTed to the HOBOlink data endpoint"""

    authentication: HobolinkAuthentication
    query: HobolinkQuery


class HobolinkObservation(BaseModel):
    """Single observation recorded by a logger channel"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    logger_sn: str
    sensor_sn: str = Field("", alias="serial_sn")
    channel_num: Optional[int] = None
    timestamp: Optional[datetime] = None
    data_type: str = ""
    si_value: Optional[float] = None
    si_unit: str = ""
    us_value: Optional[float] = None
    us_unit: str = ""
    scaled_value: Optional[float] = None
    scaled_unit: str = ""

    @field_validator(
        "logger_sn", "sensor_sn", "data_type", "si_unit", "us_unit", "scaled_unit",
        mode="before",
    )
    @classmethod
    def _null_to_empty(cls, value):
        return "" if value is None else value


class HobolinkObservations(BaseModel):
    """Response envelope of the HOBOlink data endpoint"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    observations: List[HobolinkObservation] = Field(..., alias="observationList")
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, value):
        return "" if value is None else value


# iMonnit


class ImonnitSensorDetail(BaseModel):
    """Details and current reading of one iMonnit sensor"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sensor_id: int = Field(..., alias="SensorID")
    sensor_name: str = Field("", alias="SensorName")
    current_reading: str = Field("", alias="CurrentReading")
    application_id: Optional[int] = Field(None, alias="ApplicationID")
    network_id: Optional[int] = Field(None, alias="CSNetID")
    last_communication_date: Optional[str] = Field(None, alias="LastCommunicateDate")
    next_communication_date: Optional[str] = Field(None, alias="NextCommunicateDate")
    status: Optional[int] = Field(None, alias="Status")
    battery_level: Optional[int] = Field(None, alias="BatteryLevel")
    signal_strength: Optional[int] = Field(None, alias="SignalStrength")
    # Key is misspelled by the vendor
    alerts_active: Optional[bool] = Field(None, alias="AlertsActvie")
    report_interval: Optional[int] = Field(None, alias="ReportInterval")
    tag: Optional[str] = Field(None, alias="Tag")

    # The API sends null for sensors that have not reported yet
    @field_validator("sensor_name", "current_reading", mode="before")
    @classmethod
    def _null_to_empty(cls, value):
        return "" if value is None else value


class ImonnitSensorList(BaseModel):
    """Response envelope of ``sensorlist``"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str = Field("", alias="Method")
    sensors: List[ImonnitSensorDetail] = Field(..., alias="Result")


class ImonnitNetworkDetail(BaseModel):
    """One wireless network of an iMonnit account"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    network_id: int = Field(..., alias="NetworkID")
    network_name: str = Field("", alias="NetworkName")
    send_notifications: Optional[bool] = Field(None, alias="SendNotifications")
    external_access_until: Optional[str] = Field(None, alias="ExternalAccessUntil")

    @field_validator("network_name", mode="before")
    @classmethod
    def _null_name(cls, value):
        return "" if value is None else value


class ImonnitNetworkList(BaseModel):
    """Response envelope of ``networklist``"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str = Field("", alias="Method")
    networks: List[ImonnitNetworkDetail] = Field(..., alias="Result")
