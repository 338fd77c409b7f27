"""Ядро оракула: дескрипторы, реестр, модели запросов и исключения."""
