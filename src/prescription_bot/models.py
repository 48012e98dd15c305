from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    ValidationError,
    ValidationInfo,
    model_validator,
)

from .errors import DecodeError


class Prescription(BaseModel):
    """Prescription record submitted by a user as one JSON chat message"""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    lpu: StrictStr = Field(default="", alias="Lpu", description="Medical facility name")
    discount: StrictStr = Field(
        default="",
        alias="Discount",
        description="Benefit code: '0' none, '1' subsidized, '2' commercial",
    )
    seria: StrictStr = Field(default="", alias="Seria", description="Prescription series")
    number: StrictStr = Field(default="", alias="Number", description="Prescription number")
    date: StrictStr = Field(default="", alias="Date", description="Issue date, DD.MM.YYYY")
    valid_until: StrictStr = Field(
        default="",
        alias="ValidUntil",
        description="Validity end date, always computed from Date and ExpPeriod",
    )
    exp_period: StrictStr = Field(
        default="",
        alias="ExpPeriod",
        description="Expiration period, leading token is a day count",
    )
    doctor_fio: StrictStr = Field(default="", alias="DoctorFio", description="Prescriber full name")
    medicine: StrictStr = Field(default="", alias="Medicine", description="Medicine name")
    medform: StrictStr = Field(default="", alias="Medform", description="Dosage form")
    dose: StrictStr = Field(default="", alias="Dose", description="Dose")
    dose_measure: StrictStr = Field(default="", alias="DoseMeasure", description="Dose unit")
    pack_numb: StrictStr = Field(default="", alias="PackNumb", description="Number of packs")
    pack_count: StrictStr = Field(default="", alias="PackCount", description="Units per pack")
    use_method: StrictStr = Field(default="", alias="UseMethod", description="Usage method")

    @model_validator(mode="before")
    @classmethod
    def match_payload_keys(cls, data: Any, info: ValidationInfo) -> Any:
        # payload keys: exact alias first, then case-insensitive; null keeps the default
        if not isinstance(data, dict) or not (info.context or {}).get("payload"):
            return data
        aliases = {field.alias for field in cls.model_fields.values() if field.alias}
        folded = {alias.casefold(): alias for alias in aliases}
        matched: dict[str, Any] = {}
        for key, value in data.items():
            alias = key if key in aliases else folded.get(str(key).casefold())
            if alias is None or value is None:
                continue
            matched[alias] = value
        return matched

    @classmethod
    def from_message(cls, text: str) -> "Prescription":
        """Decode a chat message into a record, raising DecodeError on bad input."""
        try:
            return cls.model_validate_json(text, context={"payload": True})
        except ValidationError as e:
            raise DecodeError(f"Invalid prescription payload: {e.error_count()} error(s)") from e

    def with_validity(self, valid_until: str) -> "Prescription":
        return self.model_copy(update={"valid_until": valid_until})
