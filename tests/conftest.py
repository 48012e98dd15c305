import time
from typing import Any

import pytest

import prescription_bot.workflow as workflow_module
from prescription_bot.errors import ConversionError

FAKE_PDF = b"%PDF-1.7 fake document"


class FakeConverter:
    """Records the markup it receives and returns a fixed PDF payload."""

    def __init__(self, document: bytes = FAKE_PDF) -> None:
        self.document = document
        self.calls: list[str] = []

    def convert(self, markup: str) -> bytes:
        self.calls.append(markup)
        return self.document


class FailingConverter:
    def convert(self, markup: str) -> bytes:
        raise ConversionError("engine crashed")


class SlowConverter:
    def __init__(self, delay: float) -> None:
        self.delay = delay

    def convert(self, markup: str) -> bytes:
        time.sleep(self.delay)
        return FAKE_PDF


@pytest.fixture(autouse=True)
def reset_workflow_resources():
    yield
    workflow_module.reset()


@pytest.fixture
def fake_converter() -> FakeConverter:
    converter = FakeConverter()
    workflow_module.configure(converter=converter)
    return converter


@pytest.fixture
def payload() -> dict[str, Any]:
    return {
        "Lpu": "ГБУЗ Городская поликлиника №1",
        "Discount": "1",
        "Seria": "",
        "Number": "",
        "Date": "01.01.2024",
        "ValidUntil": "",
        "ExpPeriod": "30 days",
        "DoctorFio": "",
        "Medicine": "Aspirin",
        "Medform": "",
        "Dose": "",
        "DoseMeasure": "",
        "PackNumb": "",
        "PackCount": "",
        "UseMethod": "",
    }
