"""Веб-API мини-приложения."""
