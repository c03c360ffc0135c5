# JSON mirror file: whole-document reads, and read-modify-write under one lock.
#
# The lock is a sibling "<name>.lock" created with O_EXCL, held for the whole
# update so two writers can't interleave their reads and writes.

from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
import json
import os
import time
from typing import Callable, Dict, Iterator

Document = Dict[str, object]


@contextmanager
def locked(path: Path, timeout: float = 3.0, poll: float = 0.05) -> Iterator[None]:
    lock = path.with_name(path.name + ".lock")
    deadline = time.monotonic() + timeout
    while True:
        try:
            os.close(os.open(lock, os.O_CREAT | os.O_EXCL | os.O_WRONLY))
            break
        except FileExistsError:
            if time.monotonic() > deadline:
                # Left behind by a crashed writer
                lock.unlink(missing_ok=True)
                deadline = time.monotonic() + timeout
            time.sleep(poll)
    try:
        yield
    finally:
        lock.unlink(missing_ok=True)


def read_document(path: str | Path) -> Document:
    """Missing, corrupt or non-object content reads as an empty document."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def rewrite_document(path: str | Path, change: Callable[[Document], Document]) -> Document:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with locked(p):
        doc = change(read_document(p))
        staged = p.with_name(p.name + ".tmp")
        staged.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(staged, p)
    return doc
