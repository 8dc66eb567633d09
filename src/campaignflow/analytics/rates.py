from __future__ import annotations


def response_rate(replies: int, leads: int) -> float:
    if replies <= 0 or leads <= 0:
        return 0.0
    return replies / leads * 100


def conversion_rate(appointments: int, replies: int) -> float:
    if replies <= 0:
        return 0.0
    return appointments / replies * 100


def display_rate(value: float) -> float:
    return round(value, 1)
