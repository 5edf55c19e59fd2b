"""UI string catalog for the supported locales."""

from __future__ import annotations

LOCALES: tuple[str, ...] = ("en", "ja")
DEFAULT_LOCALE = "en"

CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "chat.title": "Farming Strategy Assistant",
        "input.placeholder": "Ask a question about farming...",
        "input.send": "Send",
        "input.attach": "Attach",
        "attachment.staged": "File attached: {name}",
        "attachment.prompt": "Path of the file to attach",
        "attachment.invalid": "Attachment rejected: {reason}",
        "status.idle": "Ready",
        "status.composing": "Composing",
        "status.sending": "Waiting for reply",
        "status.messages": "Messages: {count}",
        "typing": "Assistant is typing...",
        "sender.user": "You",
        "sender.assistant": "Assistant",
        "weather.title": "Weather",
        "weather.unavailable": "Weather data is unavailable.",
    },
    "ja": {
        "chat.title": "農業戦略アシスタント",
        "input.placeholder": "農業に関する質問を入力してください...",
        "input.send": "送信",
        "input.attach": "添付",
        "attachment.staged": "ファイルを添付しました: {name}",
        "attachment.prompt": "添付するファイルのパス",
        "attachment.invalid": "添付できません: {reason}",
        "status.idle": "待機中",
        "status.composing": "入力中",
        "status.sending": "返信待ち",
        "status.messages": "メッセージ: {count}",
        "typing": "アシスタントが入力中...",
        "sender.user": "あなた",
        "sender.assistant": "アシスタント",
        "weather.title": "天気",
        "weather.unavailable": "天気データを取得できません。",
    },
}


def normalize_locale(locale: str | None) -> str:
    """Return a supported locale, matching on the primary language subtag."""
    if not locale:
        return DEFAULT_LOCALE
    primary = locale.strip().lower().replace("_", "-").split("-", 1)[0]
    return primary if primary in LOCALES else DEFAULT_LOCALE


def translate(key: str, locale: str | None = None, **params: object) -> str:
    """Look up ``key`` for ``locale``, falling back to the default locale, then the key."""
    active = normalize_locale(locale)
    template = CATALOG[active].get(key) or CATALOG[DEFAULT_LOCALE].get(key) or key
    if params:
        try:
            return template.format(**params)
        except (KeyError, IndexError):
            return template
    return template
