"""User-facing bot texts."""

from __future__ import annotations

from telegram.constants import MessageLimit

# Headroom below the API limit for characters Telegram counts twice.
MESSAGE_CHUNK_LIMIT = MessageLimit.MAX_TEXT_LENGTH - 96

START_MESSAGE = """🤖 <b>Бот для обновления дат доставки</b>

📝 <b>Как использовать:</b>
Просто отправьте мне текст в формате:

<i>Москва с 9.02
Тула с 9.02
Питер с 8.02
Воронеж с 12.02</i>

Или с исключениями:
<i>Москва с 9.02 (кроме 16.02)
Тула с 9.02 (кроме 16.02, 20.02)</i>

Бот автоматически:
1️⃣ Распарсит данные
2️⃣ Покажет что будет обновлено
3️⃣ Обновит данные в базе
4️⃣ Отправит подтверждение

📋 <b>Команды:</b>
/start - показать это сообщение
/help - помощь
/dates - текущие даты доставки"""

HELP_MESSAGE = """📋 <b>Формат данных:</b>

Каждая строка должна быть в формате:
<b>Город с ДД.ММ</b>

Примеры:
• Москва с 9.02
• Санкт-Петербург с 8.02
• Воронеж с 12.02 (кроме 16.02)
• Тула с 9.02 (кроме 16.02, 20.02 и 25.02)

<b>Важно:</b>
• Каждый город на новой строке
• Дата в формате ДД.ММ (например: 9.02, 12.02)
• Исключения указываются после слова «кроме»"""

ACCESS_DENIED_MESSAGE = "❌ У вас нет доступа к этому боту."
EMPTY_TEXT_MESSAGE = "❌ Пожалуйста, отправьте текст с датами доставки."
PROCESSING_MESSAGE = "⏳ Обрабатываю данные..."
SAVING_MESSAGE = "⏳ Обновляю данные в базе..."
NOTHING_RECOGNIZED_MESSAGE = (
    "❌ Не найдено ни одной записи в правильном формате.\n\n"
    'Используйте формат: "Город с ДД.ММ"\n\n'
    "Пример: Москва с 9.02"
)


def error_message(correlation_id: str) -> str:
    return (
        "❌ Произошла ошибка при обработке сообщения.\n\n"
        "Попробуйте еще раз или обратитесь к администратору. "
        f"correlation_id={correlation_id}"
    )


def split_message(text: str, limit: int = MESSAGE_CHUNK_LIMIT) -> list[str]:
    """Split ``text`` on line breaks into chunks no longer than ``limit``.

    A single line longer than ``limit`` is cut into fixed-size pieces.
    """
    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        pieces = [line[start : start + limit] for start in range(0, len(line), limit)] or [""]
        for piece in pieces:
            candidate = f"{current}\n{piece}" if current else piece
            if len(candidate) <= limit:
                current = candidate
                continue
            chunks.append(current)
            current = piece
    if current.strip():
        chunks.append(current)
    return [chunk.strip("\n") for chunk in chunks if chunk.strip()]
