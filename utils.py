# utils.py
from typing import Iterable


def chunks(iterable: Iterable, size: int):
    lst = list(iterable)
    for i in range(0, len(lst), size):
        yield lst[i:i+size]
