"""Контексты примитивов (cryptography / pycryptodome) с гарантированным освобождением."""
