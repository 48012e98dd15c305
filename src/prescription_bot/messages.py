START_COMMAND = "/start"

GREETING_TEXT = "Привет! Отправь мне JSON с данными рецепта."
INVALID_FORMAT_TEXT = "Ошибка в формате данных. Пожалуйста, отправьте корректный JSON."
PROCESSING_FAILED_TEXT = "Не удалось сформировать рецепт. Проверьте дату и срок действия."
TIMING_TEMPLATE = "Обработка заняла: {duration}"


def format_duration(seconds: float) -> str:
    """Format an elapsed time as milliseconds below one second, seconds above."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.2f}s"


def timing_text(seconds: float) -> str:
    return TIMING_TEMPLATE.format(duration=format_duration(seconds))
