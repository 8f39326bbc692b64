"""Filesystem helpers for task steps."""

from __future__ import annotations

import asyncio
import json
import shutil
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

__all__ = ["copy_files", "copy_folder", "read_json_file", "write_json_to_file"]

PathLike = Union[str, Path]
FileNameMapper = Callable[[Path], PathLike]


def _write_json(path: Path, obj: Any) -> None:
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


async def write_json_to_file(path: PathLike, obj: Any) -> Path:
    """Write ``obj`` as pretty-printed (2-space) JSON to ``path``."""
    target = Path(path)
    await asyncio.to_thread(_write_json, target, obj)
    return target


async def read_json_file(path: PathLike) -> Any:
    text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
    return json.loads(text)


def copy_files(
    source: PathLike,
    files: Iterable[str],
    destination: PathLike,
    file_name_mapper: Optional[FileNameMapper] = None,
) -> List[Path]:
    """Copy ``files`` (names relative to ``source``) into ``destination``.

    ``file_name_mapper`` receives each destination path and returns the path
    actually written, which allows renaming while copying.
    """
    copied: List[Path] = []
    for name in files:
        target = Path(destination) / name
        if file_name_mapper is not None:
            target = Path(file_name_mapper(target))
        copied.append(Path(shutil.copyfile(Path(source) / name, target)))
    return copied


async def copy_folder(
    source: PathLike,
    destination: PathLike,
    file_name_mapper: Optional[FileNameMapper] = None,
) -> List[Path]:
    """Copy every regular file at the top level of ``source`` into ``destination``."""
    src = Path(source)
    names = sorted(p.name for p in src.iterdir() if p.is_file())
    return await asyncio.to_thread(copy_files, src, names, destination, file_name_mapper)
