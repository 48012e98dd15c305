from prescription_bot.messages import format_duration, timing_text


def test_format_duration() -> None:
    assert format_duration(0.0123) == "12ms"
    assert format_duration(0.9994) == "999ms"
    assert format_duration(1.5) == "1.50s"
    assert format_duration(12.346) == "12.35s"


def test_timing_text() -> None:
    assert timing_text(2) == "Обработка заняла: 2.00s"
