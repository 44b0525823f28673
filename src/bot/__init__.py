"""Telegram-бот кафе."""
